"""Discover installed packages whose local definition carries another version."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from portup.domain.model import PackageSpec, StatusSnapshot
    from portup.domain.ports.definitions import DefinitionProvider


@dataclass(frozen=True, slots=True, kw_only=True)
class OutdatedPackage:
    spec: PackageSpec
    installed_version: str
    available_version: str


def find_outdated_packages(
    *,
    status: StatusSnapshot,
    definitions: DefinitionProvider,
) -> tuple[OutdatedPackage, ...]:
    """Return every installed package whose definition version differs, ordered by spec.

    Installed packages without a definition are skipped; they cannot be rebuilt.
    """

    outdated: list[OutdatedPackage] = []
    for record in status:
        definition = definitions.lookup(record.spec.name)
        if definition is None:
            continue
        if definition.version != record.version:
            outdated.append(
                OutdatedPackage(
                    spec=record.spec,
                    installed_version=record.version,
                    available_version=definition.version,
                )
            )
    return tuple(outdated)
