"""Plan actions and the upgrade plan builder.

The builder is the core's side of the resolver contract: it forwards each
distinct upgrade request to a :class:`DependencyResolver` exactly once and
turns the resolver's output into an :class:`ActionPlan` without duplicate
actions. Build options are normalised uniformly afterwards by
:func:`apply_build_options`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Final, TypeAlias

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from portup.domain.model import Definition, PackageSpec
    from portup.domain.ports.planning import DependencyResolver

log = logging.getLogger(__name__)


class ActionKind(StrEnum):
    REMOVE = "remove"
    INSTALL = "install"


class RequestType(StrEnum):
    USER_REQUESTED = "user_requested"
    AUTO_SELECTED = "auto_selected"


@dataclass(frozen=True, slots=True, kw_only=True)
class BuildOptions:
    use_head_version: bool = False
    allow_downloads: bool = True
    clean_buildtrees: bool = False


UPGRADE_BUILD_OPTIONS: Final[BuildOptions] = BuildOptions(
    use_head_version=False,
    allow_downloads=True,
    clean_buildtrees=True,
)


@dataclass(frozen=True, slots=True, kw_only=True)
class RemoveAction:
    spec: PackageSpec
    request_type: RequestType = RequestType.AUTO_SELECTED
    installed_version: str | None = None

    @property
    def kind(self) -> ActionKind:
        return ActionKind.REMOVE


@dataclass(slots=True, kw_only=True)
class InstallAction:
    spec: PackageSpec
    definition: Definition
    request_type: RequestType = RequestType.AUTO_SELECTED
    build_options: BuildOptions = field(default_factory=BuildOptions)

    @property
    def kind(self) -> ActionKind:
        return ActionKind.INSTALL


PlanAction: TypeAlias = RemoveAction | InstallAction


class ActionPlan:
    """Ordered, duplicate-free sequence of plan actions for one run."""

    __slots__ = ("_actions",)

    def __init__(self, actions: Iterable[PlanAction] = ()) -> None:
        seen: set[tuple[ActionKind, PackageSpec]] = set()
        ordered: list[PlanAction] = []
        for action in actions:
            key = (action.kind, action.spec)
            if key in seen:
                log.debug("Dropping duplicate %s action for %s", action.kind, action.spec)
                continue
            seen.add(key)
            ordered.append(action)
        self._actions: tuple[PlanAction, ...] = tuple(ordered)

    def __iter__(self) -> Iterator[PlanAction]:
        return iter(self._actions)

    def __len__(self) -> int:
        return len(self._actions)

    def __bool__(self) -> bool:
        return bool(self._actions)

    @property
    def actions(self) -> tuple[PlanAction, ...]:
        return self._actions

    @property
    def install_actions(self) -> tuple[InstallAction, ...]:
        return tuple(action for action in self._actions if isinstance(action, InstallAction))

    @property
    def remove_actions(self) -> tuple[RemoveAction, ...]:
        return tuple(action for action in self._actions if isinstance(action, RemoveAction))

    def rebuilt_specs(self) -> frozenset[PackageSpec]:
        """Specs that are both removed and installed again (i.e. rebuilt)."""

        removed = {action.spec for action in self.remove_actions}
        return frozenset(action.spec for action in self.install_actions if action.spec in removed)


def apply_build_options(plan: ActionPlan, options: BuildOptions = UPGRADE_BUILD_OPTIONS) -> None:
    """Overwrite the build options of every install action in ``plan``."""

    for action in plan.install_actions:
        action.build_options = options


class UpgradePlanBuilder:
    """Stateful accumulator of upgrade requests for one run."""

    def __init__(self, resolver: DependencyResolver) -> None:
        self._resolver = resolver
        self._requested: list[PackageSpec] = []

    @property
    def requested(self) -> tuple[PackageSpec, ...]:
        return tuple(self._requested)

    def request(self, spec: PackageSpec) -> None:
        if spec in self._requested:
            log.debug("Upgrade of %s already requested", spec)
            return
        self._requested.append(spec)
        self._resolver.upgrade(spec)

    def serialize(self) -> ActionPlan:
        if not self._requested:
            return ActionPlan()
        return ActionPlan(self._resolver.serialize())
