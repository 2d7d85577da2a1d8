"""Sort explicitly requested specs into upgrade outcome buckets.

The installed check and the definition check are independent: a spec that
is neither installed nor defined is reported in both ``not_installed`` and
``no_definition``. Only installed specs with a definition can land in
``up_to_date`` or ``to_upgrade``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from portup.domain.model import PackageSpec, StatusSnapshot
    from portup.domain.ports.definitions import DefinitionProvider


@dataclass(frozen=True, slots=True, kw_only=True)
class SpecClassification:
    up_to_date: tuple[PackageSpec, ...] = ()
    not_installed: tuple[PackageSpec, ...] = ()
    no_definition: tuple[PackageSpec, ...] = ()
    to_upgrade: tuple[PackageSpec, ...] = ()

    @property
    def has_input_errors(self) -> bool:
        return bool(self.not_installed or self.no_definition)


def classify_specs(
    specs: Iterable[PackageSpec],
    *,
    status: StatusSnapshot,
    definitions: DefinitionProvider,
) -> SpecClassification:
    up_to_date: list[PackageSpec] = []
    not_installed: list[PackageSpec] = []
    no_definition: list[PackageSpec] = []
    to_upgrade: list[PackageSpec] = []

    for spec in dict.fromkeys(specs):
        installed = status.find(spec)
        if installed is None:
            not_installed.append(spec)

        definition = definitions.lookup(spec.name)
        if definition is None:
            no_definition.append(spec)
        elif installed is not None:
            if definition.version != installed.version:
                to_upgrade.append(spec)
            else:
                up_to_date.append(spec)

    return SpecClassification(
        up_to_date=tuple(sorted(up_to_date)),
        not_installed=tuple(sorted(not_installed)),
        no_definition=tuple(sorted(no_definition)),
        to_upgrade=tuple(sorted(to_upgrade)),
    )
