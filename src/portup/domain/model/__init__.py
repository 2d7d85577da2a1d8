"""Domain model for installed packages and their definitions."""

from __future__ import annotations

from .package import Definition, InstalledRecord, StatusSnapshot
from .spec import InvalidPackageSpecError, PackageSpec, parse_package_spec

__all__ = [
    "Definition",
    "InstalledRecord",
    "InvalidPackageSpecError",
    "PackageSpec",
    "StatusSnapshot",
    "parse_package_spec",
]
