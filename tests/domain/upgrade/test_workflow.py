from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from portup.adapters.graph import PackageGraph
from portup.domain.upgrade import (
    UPGRADE_BUILD_OPTIONS,
    ActionOutcome,
    DryRunGate,
    EmptyPlanError,
    FailurePolicy,
    InvalidSpecsError,
    UpgradeResult,
    UpgradeStatus,
    run_upgrade,
)
from tests.helpers.packages import (
    FakeDefinitionProvider,
    FakeStatusDatabase,
    RecordingInstaller,
    RecordingReporter,
    StubResolver,
    definition,
    install_action,
    installed,
    spec,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from portup.domain.model import PackageSpec, StatusSnapshot
    from portup.domain.ports import DependencyResolver


class ResolverFactorySpy:
    def __init__(self, resolver: DependencyResolver) -> None:
        self.resolver = resolver
        self.snapshots: list[StatusSnapshot] = []

    def __call__(self, status: StatusSnapshot) -> DependencyResolver:
        self.snapshots.append(status)
        return self.resolver


class Scenario:
    def __init__(
        self,
        *,
        database: FakeStatusDatabase,
        definitions: FakeDefinitionProvider,
        resolver: DependencyResolver | None = None,
        installer: RecordingInstaller | None = None,
    ) -> None:
        self.database = database
        self.definitions = definitions
        self.resolver_factory = ResolverFactorySpy(resolver or StubResolver())
        self.installer = installer or RecordingInstaller()
        self.reporter = RecordingReporter()

    def run(
        self,
        specs: Sequence[PackageSpec] = (),
        *,
        commit: bool = False,
        keep_going: bool = False,
    ) -> UpgradeResult:
        return run_upgrade(
            specs,
            gate=DryRunGate.from_confirmation(commit),
            policy=FailurePolicy.from_keep_going(keep_going),
            definitions=self.definitions,
            resolver_factory=self.resolver_factory,
            installer=self.installer,
            unit_of_work_factory=self.database,
            reporter=self.reporter,
        )


def _three_package_scenario(*, failing: Sequence[PackageSpec] = ()) -> Scenario:
    return Scenario(
        database=FakeStatusDatabase.with_records(
            installed("alpha", "1"), installed("beta", "1"), installed("gamma", "1")
        ),
        definitions=FakeDefinitionProvider(
            [definition("alpha", "2"), definition("beta", "2"), definition("gamma", "2")]
        ),
        resolver=StubResolver(
            [install_action("alpha"), install_action("beta"), install_action("gamma")]
        ),
        installer=RecordingInstaller(failing=failing),
    )


def test_no_specs_and_nothing_outdated_never_builds_a_plan() -> None:
    scenario = Scenario(
        database=FakeStatusDatabase.with_records(installed("zlib", "1.3")),
        definitions=FakeDefinitionProvider([definition("zlib", "1.3")]),
    )

    result = scenario.run(commit=True)

    assert result.status is UpgradeStatus.NOTHING_TO_DO
    assert scenario.resolver_factory.snapshots == []
    assert scenario.reporter.events == ["all_up_to_date"]
    assert scenario.installer.calls == []


def test_up_to_date_spec_is_reported_and_not_upgraded() -> None:
    scenario = Scenario(
        database=FakeStatusDatabase.with_records(installed("zlib", "1.3")),
        definitions=FakeDefinitionProvider([definition("zlib", "1.3")]),
    )

    result = scenario.run([spec("zlib")], commit=True)

    assert result.status is UpgradeStatus.NOTHING_TO_DO
    assert result.classification is not None
    assert result.classification.up_to_date == (spec("zlib"),)
    assert result.classification.to_upgrade == ()
    assert scenario.resolver_factory.snapshots == []


def test_invalid_specs_abort_before_planning_with_full_listing() -> None:
    scenario = Scenario(
        database=FakeStatusDatabase.with_records(
            installed("zlib", "1.2"), installed("legacy", "0.1")
        ),
        definitions=FakeDefinitionProvider([definition("zlib", "1.3")]),
    )

    with pytest.raises(InvalidSpecsError) as excinfo:
        scenario.run([spec("zlib"), spec("ghost"), spec("legacy")], commit=True)

    assert excinfo.value.not_installed == (spec("ghost"),)
    assert excinfo.value.no_definition == (spec("ghost"), spec("legacy"))
    assert "ghost:x64-linux" in str(excinfo.value)
    assert "legacy:x64-linux" in str(excinfo.value)
    assert scenario.reporter.events == ["classification"]
    assert scenario.resolver_factory.snapshots == []
    assert scenario.installer.calls == []


def test_preview_prints_plan_and_touches_nothing() -> None:
    scenario = _three_package_scenario()

    result = scenario.run([spec("alpha"), spec("beta"), spec("gamma")])

    assert result.status is UpgradeStatus.PREVIEW
    assert result.summary is None
    assert scenario.reporter.events == ["classification", "plan", "dry_run"]
    assert scenario.reporter.plan is not None
    assert len(scenario.reporter.plan) == 3
    assert scenario.installer.calls == []
    assert scenario.database.units[1:] == []
    assert scenario.database.store.records[spec("alpha")].version == "1"


def test_commit_stop_on_first_failure_stops_after_failing_action() -> None:
    scenario = _three_package_scenario(failing=[spec("beta")])

    result = scenario.run([spec("alpha"), spec("beta"), spec("gamma")], commit=True)

    assert result.status is UpgradeStatus.FAILED
    assert [action.spec.name for action in scenario.installer.calls] == ["alpha", "beta"]
    assert result.summary is not None
    assert result.summary.results[2].outcome is ActionOutcome.SKIPPED


def test_commit_keep_going_attempts_all_and_reports_each_outcome() -> None:
    scenario = _three_package_scenario(failing=[spec("beta")])

    result = scenario.run(
        [spec("alpha"), spec("beta"), spec("gamma")], commit=True, keep_going=True
    )

    assert result.status is UpgradeStatus.COMPLETED_WITH_FAILURES
    assert [action.spec.name for action in scenario.installer.calls] == ["alpha", "beta", "gamma"]
    assert scenario.reporter.summary is result.summary
    assert result.summary is not None
    assert [r.outcome for r in result.summary.results] == [
        ActionOutcome.SUCCEEDED,
        ActionOutcome.FAILED,
        ActionOutcome.SUCCEEDED,
    ]


def test_commit_without_failures_completes() -> None:
    scenario = _three_package_scenario()

    result = scenario.run([spec("alpha"), spec("beta"), spec("gamma")], commit=True)

    assert result.status is UpgradeStatus.COMPLETED
    assert scenario.reporter.events == ["classification", "plan", "summary"]
    assert {record.version for record in scenario.database.store.records.values()} == {"2.0"}


def test_empty_plan_is_a_hard_error() -> None:
    scenario = Scenario(
        database=FakeStatusDatabase.with_records(installed("zlib", "1.2")),
        definitions=FakeDefinitionProvider([definition("zlib", "1.3")]),
        resolver=StubResolver([]),
    )

    with pytest.raises(EmptyPlanError):
        scenario.run([spec("zlib")], commit=True)

    assert scenario.installer.calls == []


def test_no_specs_upgrades_every_outdated_package() -> None:
    resolver = StubResolver([install_action("zlib"), install_action("fmt")])
    scenario = Scenario(
        database=FakeStatusDatabase.with_records(
            installed("zlib", "1.2"), installed("fmt", "9"), installed("curl", "8")
        ),
        definitions=FakeDefinitionProvider(
            [definition("zlib", "1.3"), definition("fmt", "10"), definition("curl", "8")]
        ),
        resolver=resolver,
    )

    result = scenario.run()

    assert result.status is UpgradeStatus.PREVIEW
    assert [package.spec for package in result.outdated] == [spec("fmt"), spec("zlib")]
    assert resolver.requested == [spec("fmt"), spec("zlib")]
    assert scenario.reporter.events == ["plan", "dry_run"]


def test_repeated_spec_is_requested_and_planned_once() -> None:
    resolver = StubResolver([install_action("zlib"), install_action("zlib")])
    scenario = Scenario(
        database=FakeStatusDatabase.with_records(installed("zlib", "1.2")),
        definitions=FakeDefinitionProvider([definition("zlib", "1.3")]),
        resolver=resolver,
    )

    result = scenario.run([spec("zlib"), spec("zlib")], commit=True)

    assert resolver.requested == [spec("zlib")]
    assert result.plan is not None
    assert len(result.plan) == 1
    assert len(scenario.installer.calls) == 1


def test_plan_is_normalised_before_it_is_reported() -> None:
    scenario = _three_package_scenario()

    scenario.run([spec("alpha")])

    assert scenario.reporter.plan is not None
    assert all(
        action.build_options == UPGRADE_BUILD_OPTIONS
        for action in scenario.reporter.plan.install_actions
    )


def test_upgrade_with_package_graph_rebuilds_dependents() -> None:
    definitions = FakeDefinitionProvider(
        [
            definition("zlib", "1.3"),
            definition("libpng", "1.6", dependencies=["zlib"]),
        ]
    )
    scenario = Scenario(
        database=FakeStatusDatabase.with_records(
            installed("zlib", "1.2"), installed("libpng", "1.6", dependencies=["zlib"])
        ),
        definitions=definitions,
    )
    def graph_factory(status: StatusSnapshot) -> DependencyResolver:
        return PackageGraph(definitions, status)

    result = run_upgrade(
        [spec("zlib")],
        gate=DryRunGate.from_confirmation(True),
        policy=FailurePolicy.STOP_ON_FIRST_FAILURE,
        definitions=definitions,
        resolver_factory=graph_factory,
        installer=scenario.installer,
        unit_of_work_factory=scenario.database,
        reporter=scenario.reporter,
    )

    assert result.status is UpgradeStatus.COMPLETED
    assert [(action.kind, action.spec.name) for action in scenario.installer.calls] == [
        ("remove", "libpng"),
        ("remove", "zlib"),
        ("install", "zlib"),
        ("install", "libpng"),
    ]
    records = scenario.database.store.records
    assert records[spec("zlib")].version == "1.3"
    assert records[spec("libpng")].dependencies == ("zlib",)
