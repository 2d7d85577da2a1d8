# ruff: noqa: T201

"""Console rendering of classification buckets, plans and execution summaries."""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, TextIO

from portup.domain.upgrade import ActionOutcome, FailurePolicy, RequestType

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import timedelta

    from portup.domain.model import PackageSpec
    from portup.domain.upgrade import (
        ActionPlan,
        ExecutionSummary,
        OutdatedPackage,
        SpecClassification,
    )

DRY_RUN_HINT = (
    "If you are sure you want to rebuild the above packages, run this command with the "
    "--no-dry-run option."
)
ALL_UP_TO_DATE = "All installed packages are up-to-date with the local definitions."


def format_elapsed(elapsed: timedelta) -> str:
    seconds = elapsed.total_seconds()
    if seconds < 1:
        return f"{seconds * 1000:.0f} ms"
    if seconds < 60:
        return f"{seconds:.1f} s"
    if seconds < 3600:
        return f"{seconds / 60:.1f} min"
    return f"{seconds / 3600:.1f} h"


class ConsoleReporter:
    """Prints upgrade milestones in the layout users of the tool expect."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self.stream = stream or sys.stdout

    def _print(self, text: str = "") -> None:
        print(text, file=self.stream)

    def _print_specs(self, heading: str, specs: Iterable[PackageSpec]) -> None:
        self._print(heading)
        for spec in specs:
            self._print(f"    {spec}")
        self._print()

    def report_classification(self, classification: SpecClassification) -> None:
        if classification.up_to_date:
            self._print_specs("The following packages are up-to-date:", classification.up_to_date)
        if classification.not_installed:
            self._print_specs(
                "The following packages are not installed:", classification.not_installed
            )
        if classification.no_definition:
            self._print_specs(
                "The following packages do not have a valid definition:",
                classification.no_definition,
            )

    def report_all_up_to_date(self) -> None:
        self._print(ALL_UP_TO_DATE)

    def report_plan(self, plan: ActionPlan) -> None:
        rebuilt = plan.rebuilt_specs()
        removed_only = [a for a in plan.remove_actions if a.spec not in rebuilt]
        rebuilt_installs = [a for a in plan.install_actions if a.spec in rebuilt]
        new_installs = [a for a in plan.install_actions if a.spec not in rebuilt]

        if removed_only:
            self._print("The following packages will be removed:")
            for action in sorted(removed_only, key=lambda a: a.spec):
                self._print(f"  {_marker(action.request_type)} {action.spec}")
        if rebuilt_installs:
            self._print("The following packages will be rebuilt:")
            for action in sorted(rebuilt_installs, key=lambda a: a.spec):
                self._print(
                    f"  {_marker(action.request_type)} {action.spec} -> "
                    f"{action.definition.version}"
                )
        if new_installs:
            self._print("The following packages will be built and installed:")
            for action in sorted(new_installs, key=lambda a: a.spec):
                self._print(
                    f"  {_marker(action.request_type)} {action.spec} -> "
                    f"{action.definition.version}"
                )
        if any(action.request_type is RequestType.AUTO_SELECTED for action in plan):
            self._print("Additional packages (*) will be modified to complete this operation.")
        self._print()

    def report_dry_run(self) -> None:
        self._print(DRY_RUN_HINT)

    def report_summary(self, summary: ExecutionSummary) -> None:
        self._print()
        self._print(f"Total elapsed time: {format_elapsed(summary.total_elapsed)}")
        self._print()
        if summary.policy is not FailurePolicy.CONTINUE_ON_FAILURE:
            return

        self._print("RESULTS")
        for result in summary.results:
            line = f"    {result.kind} {result.spec}: {result.outcome.upper()}"
            if result.outcome is not ActionOutcome.SKIPPED:
                line += f": {format_elapsed(result.elapsed)}"
            self._print(line)
        self._print()
        self._print("SUMMARY")
        counts = summary.counts()
        for outcome in ActionOutcome:
            if counts[outcome]:
                self._print(f"    {outcome.upper()}: {counts[outcome]}")
        self._print()

    def report_outdated(self, outdated: Iterable[OutdatedPackage]) -> None:
        packages = list(outdated)
        if not packages:
            self._print(ALL_UP_TO_DATE)
            return
        self._print("The following packages differ from their definitions:")
        for package in packages:
            self._print(
                f"    {package.spec}: {package.installed_version} -> {package.available_version}"
            )
        self._print()


def _marker(request_type: RequestType) -> str:
    return "*" if request_type is RequestType.AUTO_SELECTED else " "
