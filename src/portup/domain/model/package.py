"""Installed-package records, package definitions and the status snapshot."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from .spec import PackageSpec


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True, kw_only=True)
class InstalledRecord:
    """One row of the status database."""

    spec: PackageSpec
    version: str
    dependencies: tuple[str, ...] = ()
    installed_at: datetime = field(default_factory=_utcnow, compare=False)


@dataclass(frozen=True, slots=True, kw_only=True)
class Definition:
    """Locally available description of how to build a package.

    Definitions are keyed by name only; the same definition serves every
    triplet. ``build`` and ``remove`` hold argv lists run by the installer.
    """

    name: str
    version: str
    dependencies: tuple[str, ...] = ()
    description: str = ""
    build: tuple[tuple[str, ...], ...] = ()
    remove: tuple[tuple[str, ...], ...] = ()


class StatusSnapshot:
    """Read-only view over the installed packages captured at one point in time."""

    __slots__ = ("_records",)

    def __init__(self, records: Iterable[InstalledRecord] = ()) -> None:
        self._records: dict[PackageSpec, InstalledRecord] = {}
        for record in records:
            self._records[record.spec] = record

    def __iter__(self) -> Iterator[InstalledRecord]:
        return iter(sorted(self._records.values(), key=lambda record: record.spec))

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, spec: object) -> bool:
        return spec in self._records

    def find(self, spec: PackageSpec) -> InstalledRecord | None:
        return self._records.get(spec)

    def dependents_of(self, spec: PackageSpec) -> tuple[InstalledRecord, ...]:
        """Installed packages of the same triplet built against ``spec``."""

        return tuple(
            record
            for record in self
            if record.spec.triplet == spec.triplet and spec.name in record.dependencies
        )
