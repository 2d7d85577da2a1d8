"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from portup.adapters.graph import PackageGraph
from portup.adapters.installer import SubprocessInstaller
from portup.adapters.ports_tree import PortsTreeDefinitionProvider
from portup.adapters.sqlalchemy.unit_of_work import SqlAlchemyStatusUnitOfWork, is_started, startup
from portup.config import get_upgrade_config
from portup.domain.model import InvalidPackageSpecError, parse_package_spec
from portup.domain.ports.unit_of_work import StatusUnitOfWork
from portup.domain.upgrade import (
    DryRunGate,
    FailurePolicy,
    find_outdated_packages,
    load_status_snapshot,
    run_upgrade,
)
from portup.ui.report import ConsoleReporter

if TYPE_CHECKING:
    from collections.abc import Iterable

    from portup.config import UpgradeConfig
    from portup.domain.model import PackageSpec, StatusSnapshot
    from portup.domain.ports import DefinitionProvider, PackageInstaller
    from portup.domain.upgrade import OutdatedPackage, UpgradeReporter, UpgradeResult

UnitOfWorkFactory = Callable[[], StatusUnitOfWork]


log = getLogger(__name__)


def resolve_specs(values: Iterable[str], *, config: UpgradeConfig) -> tuple[PackageSpec, ...]:
    """Parse command-line package arguments and reject unknown triplets."""

    specs = tuple(
        parse_package_spec(value, default_triplet=config.default_triplet) for value in values
    )
    unknown = sorted({spec.triplet for spec in specs if not config.is_known_triplet(spec.triplet)})
    if unknown:
        raise InvalidPackageSpecError(
            f"Unknown triplet(s): {', '.join(unknown)}. "
            f"Known triplets: {', '.join(config.known_triplets)}"
        )
    return specs


def _default_unit_of_work_factory() -> UnitOfWorkFactory:
    if not is_started():
        startup()
    return SqlAlchemyStatusUnitOfWork


def upgrade_packages(
    specs: Iterable[PackageSpec] = (),
    *,
    no_dry_run: bool = False,
    keep_going: bool = False,
    config: UpgradeConfig | None = None,
    definitions: DefinitionProvider | None = None,
    installer: PackageInstaller | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    reporter: UpgradeReporter | None = None,
) -> UpgradeResult:
    """Upgrade the given specs (or every outdated package) using the configured adapters."""

    effective_config = config or get_upgrade_config()
    effective_definitions = definitions or PortsTreeDefinitionProvider(effective_config.ports_dir)
    effective_installer = installer or SubprocessInstaller(
        ports_dir=effective_config.ports_dir,
        buildtrees_dir=effective_config.buildtrees_dir,
        definitions=effective_definitions,
    )
    effective_uow = unit_of_work_factory or _default_unit_of_work_factory()
    requested = tuple(specs)

    log.info(
        "Starting upgrade: specs=%s, no_dry_run=%s, keep_going=%s, ports_dir=%s",
        [str(spec) for spec in requested] or "<all outdated>",
        no_dry_run,
        keep_going,
        effective_config.ports_dir,
    )

    def resolver_factory(status: StatusSnapshot) -> PackageGraph:
        return PackageGraph(effective_definitions, status)

    result = run_upgrade(
        requested,
        gate=DryRunGate.from_confirmation(no_dry_run),
        policy=FailurePolicy.from_keep_going(keep_going),
        definitions=effective_definitions,
        resolver_factory=resolver_factory,
        installer=effective_installer,
        unit_of_work_factory=effective_uow,
        reporter=reporter or ConsoleReporter(),
    )

    log.info("Finished upgrade: status=%s", result.status)
    return result


def list_outdated_packages(
    *,
    config: UpgradeConfig | None = None,
    definitions: DefinitionProvider | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> tuple[OutdatedPackage, ...]:
    """Return installed packages whose local definition has another version."""

    effective_config = config or get_upgrade_config()
    effective_definitions = definitions or PortsTreeDefinitionProvider(effective_config.ports_dir)
    effective_uow = unit_of_work_factory or _default_unit_of_work_factory()

    status = load_status_snapshot(effective_uow)
    return find_outdated_packages(status=status, definitions=effective_definitions)
