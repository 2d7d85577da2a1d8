"""Upgrade workflow: classification, planning, dry-run gate and execution."""

from __future__ import annotations

from .classify import SpecClassification, classify_specs
from .errors import (
    ActionFailedError,
    EmptyPlanError,
    InvalidSpecsError,
    PlanResolutionError,
    UpgradeError,
)
from .execute import ActionOutcome, ActionResult, ExecutionSummary, perform
from .gate import DryRunGate, FailurePolicy, GateMode
from .outdated import OutdatedPackage, find_outdated_packages
from .plan import (
    UPGRADE_BUILD_OPTIONS,
    ActionKind,
    ActionPlan,
    BuildOptions,
    InstallAction,
    PlanAction,
    RemoveAction,
    RequestType,
    UpgradePlanBuilder,
    apply_build_options,
)
from .workflow import (
    ResolverFactory,
    UpgradeReporter,
    UpgradeResult,
    UpgradeStatus,
    load_status_snapshot,
    run_upgrade,
)

__all__ = [
    "UPGRADE_BUILD_OPTIONS",
    "ActionFailedError",
    "ActionKind",
    "ActionOutcome",
    "ActionPlan",
    "ActionResult",
    "BuildOptions",
    "DryRunGate",
    "EmptyPlanError",
    "ExecutionSummary",
    "FailurePolicy",
    "GateMode",
    "InstallAction",
    "InvalidSpecsError",
    "OutdatedPackage",
    "PlanAction",
    "PlanResolutionError",
    "RemoveAction",
    "RequestType",
    "ResolverFactory",
    "SpecClassification",
    "UpgradeError",
    "UpgradePlanBuilder",
    "UpgradeReporter",
    "UpgradeResult",
    "UpgradeStatus",
    "apply_build_options",
    "classify_specs",
    "find_outdated_packages",
    "load_status_snapshot",
    "perform",
    "run_upgrade",
]
