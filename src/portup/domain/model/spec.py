"""Package identity: a package name bound to one target triplet."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Final

_IDENTIFIER: Final = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


class InvalidPackageSpecError(ValueError):
    """Raised when a package spec string cannot be parsed."""


@dataclass(frozen=True, slots=True, order=True)
class PackageSpec:
    """Identity of one package instance: ``name`` built for ``triplet``."""

    name: str
    triplet: str

    def __post_init__(self) -> None:
        if not _IDENTIFIER.match(self.name):
            raise InvalidPackageSpecError(f"Invalid package name: {self.name!r}")
        if not _IDENTIFIER.match(self.triplet):
            raise InvalidPackageSpecError(f"Invalid triplet: {self.triplet!r}")

    def __str__(self) -> str:
        return f"{self.name}:{self.triplet}"


def parse_package_spec(text: str, *, default_triplet: str) -> PackageSpec:
    """Parse ``name`` or ``name:triplet``; names are case-insensitive."""

    normalized = text.strip().lower()
    if not normalized:
        raise InvalidPackageSpecError("Empty package spec")
    name, separator, triplet = normalized.partition(":")
    if separator and not triplet:
        raise InvalidPackageSpecError(f"Missing triplet after ':' in {text!r}")
    if ":" in triplet:
        raise InvalidPackageSpecError(f"Too many ':' separators in {text!r}")
    return PackageSpec(name=name, triplet=triplet or default_triplet)
