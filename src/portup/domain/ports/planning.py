"""Ports for dependency resolution and per-action installation."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from portup.domain.model import PackageSpec
    from portup.domain.upgrade.plan import InstallAction, PlanAction, RemoveAction


@runtime_checkable
class DependencyResolver(Protocol):
    """Accumulates upgrade requests and serialises them into ordered actions.

    ``serialize`` must order actions so that every package is removed after its
    installed dependents and installed after its dependencies.
    """

    def upgrade(self, spec: PackageSpec) -> None: ...

    def serialize(self) -> Sequence[PlanAction]: ...


@runtime_checkable
class PackageInstaller(Protocol):
    """Performs the build/remove mechanics of a single plan action.

    Implementations raise ``ActionFailedError`` when the action did not complete.
    """

    def install(self, action: InstallAction) -> None: ...

    def remove(self, action: RemoveAction) -> None: ...
