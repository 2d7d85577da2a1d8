"""Execute an action plan against the installer and record installed state."""

from __future__ import annotations

import logging
import time
from collections import Counter
from dataclasses import dataclass
from datetime import timedelta
from enum import StrEnum
from typing import TYPE_CHECKING

from portup.domain.model import InstalledRecord

from .errors import ActionFailedError
from .gate import FailurePolicy
from .plan import InstallAction, RemoveAction

if TYPE_CHECKING:
    from collections.abc import Callable

    from portup.domain.model import PackageSpec
    from portup.domain.ports.planning import PackageInstaller
    from portup.domain.ports.status import InstalledPackageRepository
    from portup.domain.ports.unit_of_work import StatusUnitOfWork

    from .plan import ActionKind, ActionPlan, PlanAction

log = logging.getLogger(__name__)


class ActionOutcome(StrEnum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True, slots=True, kw_only=True)
class ActionResult:
    spec: PackageSpec
    kind: ActionKind
    outcome: ActionOutcome
    elapsed: timedelta = timedelta(0)
    error: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class ExecutionSummary:
    """Per-action outcomes of one execution, in plan order."""

    results: tuple[ActionResult, ...]
    total_elapsed: timedelta
    policy: FailurePolicy

    @property
    def failures(self) -> tuple[ActionResult, ...]:
        return tuple(r for r in self.results if r.outcome is ActionOutcome.FAILED)

    @property
    def attempted(self) -> tuple[ActionResult, ...]:
        return tuple(r for r in self.results if r.outcome is not ActionOutcome.SKIPPED)

    @property
    def ok(self) -> bool:
        return not self.failures

    def counts(self) -> Counter[ActionOutcome]:
        return Counter(r.outcome for r in self.results)


def perform(
    plan: ActionPlan,
    policy: FailurePolicy,
    *,
    installer: PackageInstaller,
    unit_of_work_factory: Callable[[], StatusUnitOfWork],
    clock: Callable[[], float] = time.perf_counter,
) -> ExecutionSummary:
    """Run ``plan`` in order, committing installed state after each successful action.

    Under ``STOP_ON_FIRST_FAILURE`` the actions after the first failure are
    reported as skipped. Actions applied before a failure stay applied.
    """

    results: list[ActionResult] = []
    stopped = False
    run_started = clock()

    with unit_of_work_factory() as uow:
        repository = uow.repositories.installed
        for index, action in enumerate(plan, start=1):
            if stopped:
                results.append(
                    ActionResult(spec=action.spec, kind=action.kind, outcome=ActionOutcome.SKIPPED)
                )
                continue

            log.info("Starting %s %s (%d/%d)", action.kind, action.spec, index, len(plan))
            started = clock()
            try:
                _apply(action, installer=installer, repository=repository)
                uow.commit()
            except ActionFailedError as exc:
                uow.rollback()
                elapsed = timedelta(seconds=clock() - started)
                log.error("Failed to %s %s: %s", action.kind, action.spec, exc)  # noqa: TRY400
                results.append(
                    ActionResult(
                        spec=action.spec,
                        kind=action.kind,
                        outcome=ActionOutcome.FAILED,
                        elapsed=elapsed,
                        error=str(exc),
                    )
                )
                stopped = policy is FailurePolicy.STOP_ON_FIRST_FAILURE
                continue

            elapsed = timedelta(seconds=clock() - started)
            log.info("Finished %s %s in %s", action.kind, action.spec, elapsed)
            results.append(
                ActionResult(
                    spec=action.spec,
                    kind=action.kind,
                    outcome=ActionOutcome.SUCCEEDED,
                    elapsed=elapsed,
                )
            )

    return ExecutionSummary(
        results=tuple(results),
        total_elapsed=timedelta(seconds=clock() - run_started),
        policy=policy,
    )


def _apply(
    action: PlanAction,
    *,
    installer: PackageInstaller,
    repository: InstalledPackageRepository,
) -> None:
    if isinstance(action, RemoveAction):
        installer.remove(action)
        repository.remove(action.spec)
        return

    if isinstance(action, InstallAction):
        installer.install(action)
        repository.add(
            InstalledRecord(
                spec=action.spec,
                version=action.definition.version,
                dependencies=action.definition.dependencies,
            )
        )
        return

    raise TypeError(f"Unsupported plan action: {action!r}")
