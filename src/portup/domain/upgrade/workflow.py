"""Upgrade orchestration: classify, plan, gate, execute.

``run_upgrade`` works on a snapshot of the status database taken at the start
of the run. The database is written only by :func:`perform`, inside its own
unit of work, after the dry-run gate has been passed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Protocol, TypeAlias

from portup.domain.model import StatusSnapshot

from .classify import SpecClassification, classify_specs
from .errors import EmptyPlanError, InvalidSpecsError
from .execute import ExecutionSummary, perform
from .gate import FailurePolicy
from .outdated import OutdatedPackage, find_outdated_packages
from .plan import ActionPlan, UpgradePlanBuilder, apply_build_options

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from portup.domain.model import PackageSpec
    from portup.domain.ports.definitions import DefinitionProvider
    from portup.domain.ports.planning import DependencyResolver, PackageInstaller
    from portup.domain.ports.unit_of_work import StatusUnitOfWork

    from .gate import DryRunGate

ResolverFactory: TypeAlias = "Callable[[StatusSnapshot], DependencyResolver]"

log = logging.getLogger(__name__)


class UpgradeStatus(StrEnum):
    NOTHING_TO_DO = "nothing_to_do"
    PREVIEW = "preview"
    COMPLETED = "completed"
    COMPLETED_WITH_FAILURES = "completed_with_failures"
    FAILED = "failed"


@dataclass(frozen=True, slots=True, kw_only=True)
class UpgradeResult:
    status: UpgradeStatus
    classification: SpecClassification | None = None
    outdated: tuple[OutdatedPackage, ...] = ()
    plan: ActionPlan | None = None
    summary: ExecutionSummary | None = None


class UpgradeReporter(Protocol):
    """Receives the user-facing milestones of an upgrade run."""

    def report_classification(self, classification: SpecClassification) -> None: ...

    def report_all_up_to_date(self) -> None: ...

    def report_plan(self, plan: ActionPlan) -> None: ...

    def report_dry_run(self) -> None: ...

    def report_summary(self, summary: ExecutionSummary) -> None: ...


def load_status_snapshot(unit_of_work_factory: Callable[[], StatusUnitOfWork]) -> StatusSnapshot:
    with unit_of_work_factory() as uow:
        return StatusSnapshot(uow.repositories.installed.list_all())


def run_upgrade(
    specs: Sequence[PackageSpec],
    *,
    gate: DryRunGate,
    policy: FailurePolicy,
    definitions: DefinitionProvider,
    resolver_factory: ResolverFactory,
    installer: PackageInstaller,
    unit_of_work_factory: Callable[[], StatusUnitOfWork],
    reporter: UpgradeReporter,
) -> UpgradeResult:
    """Upgrade ``specs``, or every outdated package when ``specs`` is empty.

    Raises ``InvalidSpecsError`` when a requested spec is not installed or has
    no definition, and ``EmptyPlanError`` when planning yields no actions.
    A preview run returns ``UpgradeStatus.PREVIEW`` without touching the
    installer or the status database.
    """

    status = load_status_snapshot(unit_of_work_factory)
    log.debug("Loaded status snapshot with %d installed packages", len(status))

    classification: SpecClassification | None = None
    outdated: tuple[OutdatedPackage, ...] = ()

    if not specs:
        outdated = find_outdated_packages(status=status, definitions=definitions)
        if not outdated:
            reporter.report_all_up_to_date()
            return UpgradeResult(status=UpgradeStatus.NOTHING_TO_DO)
        targets = tuple(package.spec for package in outdated)
    else:
        classification = classify_specs(specs, status=status, definitions=definitions)
        reporter.report_classification(classification)
        if classification.has_input_errors:
            raise InvalidSpecsError(
                not_installed=classification.not_installed,
                no_definition=classification.no_definition,
            )
        if not classification.to_upgrade:
            return UpgradeResult(
                status=UpgradeStatus.NOTHING_TO_DO, classification=classification
            )
        targets = classification.to_upgrade

    log.info("Planning upgrade of %d package(s)", len(targets))
    builder = UpgradePlanBuilder(resolver_factory(status))
    for spec in targets:
        builder.request(spec)

    plan = builder.serialize()
    if not plan:
        raise EmptyPlanError(
            "Planning produced no actions for: " + ", ".join(str(spec) for spec in targets)
        )

    apply_build_options(plan)
    reporter.report_plan(plan)

    if not gate.commits:
        reporter.report_dry_run()
        return UpgradeResult(
            status=UpgradeStatus.PREVIEW,
            classification=classification,
            outdated=outdated,
            plan=plan,
        )

    summary = perform(
        plan,
        policy,
        installer=installer,
        unit_of_work_factory=unit_of_work_factory,
    )
    reporter.report_summary(summary)

    return UpgradeResult(
        status=_status_for(summary),
        classification=classification,
        outdated=outdated,
        plan=plan,
        summary=summary,
    )


def _status_for(summary: ExecutionSummary) -> UpgradeStatus:
    if summary.ok:
        return UpgradeStatus.COMPLETED
    if summary.policy is FailurePolicy.CONTINUE_ON_FAILURE:
        return UpgradeStatus.COMPLETED_WITH_FAILURES
    return UpgradeStatus.FAILED
