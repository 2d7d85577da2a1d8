"""Ports for reading and writing the installed-package status database."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from portup.domain.model import InstalledRecord, PackageSpec


@runtime_checkable
class InstalledPackageRepository(Protocol):
    """Persistence contract for installed-package records."""

    def get(self, spec: PackageSpec) -> InstalledRecord | None: ...

    def list_all(self) -> Sequence[InstalledRecord]: ...

    def add(self, record: InstalledRecord) -> None: ...

    def remove(self, spec: PackageSpec) -> None: ...
