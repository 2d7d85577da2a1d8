"""Dependency resolver that turns upgrade requests into an ordered rebuild plan.

An upgraded package is removed and installed again. Every installed package
of the same triplet that was built against it is rebuilt as well, and
dependencies named by the new definitions that are not installed yet are
installed first. Removals run dependents-first; installs run
dependencies-first.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from portup.domain.model import PackageSpec
from portup.domain.upgrade import InstallAction, PlanResolutionError, RemoveAction, RequestType

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator

    from portup.domain.model import Definition, StatusSnapshot
    from portup.domain.ports.definitions import DefinitionProvider
    from portup.domain.upgrade import PlanAction

log = logging.getLogger(__name__)


class PackageGraph:
    def __init__(self, definitions: DefinitionProvider, status: StatusSnapshot) -> None:
        self._definitions = definitions
        self._status = status
        self._requested: dict[PackageSpec, None] = {}

    def upgrade(self, spec: PackageSpec) -> None:
        self._requested.setdefault(spec)

    def serialize(self) -> list[PlanAction]:
        rebuild = self._rebuild_closure()
        installs = self._install_closure(rebuild)

        removal_order = _topological_order(
            (spec for spec in rebuild if spec in self._status),
            self._installed_dependencies,
        )
        removal_order.reverse()
        install_order = _topological_order(
            installs,
            lambda spec: _dependency_specs(spec, installs[spec]),
        )

        actions: list[PlanAction] = [
            RemoveAction(
                spec=spec,
                request_type=self._request_type(spec),
                installed_version=self._installed_version(spec),
            )
            for spec in removal_order
        ]
        actions.extend(
            InstallAction(
                spec=spec,
                definition=installs[spec],
                request_type=self._request_type(spec),
            )
            for spec in install_order
        )
        log.debug(
            "Serialized %d removal(s) and %d install(s)", len(removal_order), len(install_order)
        )
        return actions

    def _request_type(self, spec: PackageSpec) -> RequestType:
        if spec in self._requested:
            return RequestType.USER_REQUESTED
        return RequestType.AUTO_SELECTED

    def _installed_version(self, spec: PackageSpec) -> str | None:
        record = self._status.find(spec)
        return None if record is None else record.version

    def _installed_dependencies(self, spec: PackageSpec) -> list[PackageSpec]:
        record = self._status.find(spec)
        if record is None:
            return []
        return [PackageSpec(name=name, triplet=spec.triplet) for name in record.dependencies]

    def _rebuild_closure(self) -> set[PackageSpec]:
        """Requested specs plus every installed package that transitively depends on one."""

        rebuild: set[PackageSpec] = set()
        pending = list(self._requested)
        while pending:
            spec = pending.pop()
            if spec in rebuild:
                continue
            rebuild.add(spec)
            pending.extend(record.spec for record in self._status.dependents_of(spec))
        return rebuild

    def _install_closure(self, rebuild: set[PackageSpec]) -> dict[PackageSpec, Definition]:
        installs: dict[PackageSpec, Definition] = {}
        pending = sorted(rebuild, reverse=True)
        while pending:
            spec = pending.pop()
            if spec in installs:
                continue
            definition = self._definitions.lookup(spec.name)
            if definition is None:
                raise PlanResolutionError(f"No definition available for {spec}")
            installs[spec] = definition
            for dependency in _dependency_specs(spec, definition):
                if dependency in installs:
                    continue
                if dependency in self._status and dependency not in rebuild:
                    continue
                pending.append(dependency)
        return installs


def _dependency_specs(spec: PackageSpec, definition: Definition) -> list[PackageSpec]:
    return [PackageSpec(name=name, triplet=spec.triplet) for name in definition.dependencies]


def _topological_order(
    nodes: Iterable[PackageSpec],
    dependencies_of: Callable[[PackageSpec], Iterable[PackageSpec]],
) -> list[PackageSpec]:
    """Order ``nodes`` so that each node follows its dependencies among ``nodes``.

    Depth-first over an explicit stack; ties are broken by spec order.
    """

    members = set(nodes)
    order: list[PackageSpec] = []
    done: set[PackageSpec] = set()

    def member_dependencies(spec: PackageSpec) -> Iterator[PackageSpec]:
        return iter(sorted(set(dependencies_of(spec)) & members))

    for root in sorted(members):
        if root in done:
            continue
        path = [root]
        on_path = {root}
        pending = [member_dependencies(root)]
        while pending:
            dependency = next(pending[-1], None)
            if dependency is None:
                pending.pop()
                finished = path.pop()
                on_path.discard(finished)
                done.add(finished)
                order.append(finished)
                continue
            if dependency in done:
                continue
            if dependency in on_path:
                cycle = [*path[path.index(dependency) :], dependency]
                raise PlanResolutionError(
                    "Dependency cycle: " + " -> ".join(str(item) for item in cycle)
                )
            path.append(dependency)
            on_path.add(dependency)
            pending.append(member_dependencies(dependency))
    return order
