"""Port for looking up locally available package definitions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from portup.domain.model import Definition


@runtime_checkable
class DefinitionProvider(Protocol):
    """Returns the current definition for a package name, if one is available."""

    def lookup(self, name: str) -> Definition | None: ...
