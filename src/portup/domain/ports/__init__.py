"""Domain port definitions for adapters."""

from __future__ import annotations

from .definitions import DefinitionProvider
from .planning import DependencyResolver, PackageInstaller
from .status import InstalledPackageRepository
from .unit_of_work import StatusRepositories, StatusUnitOfWork

__all__ = [
    "DefinitionProvider",
    "DependencyResolver",
    "InstalledPackageRepository",
    "PackageInstaller",
    "StatusRepositories",
    "StatusUnitOfWork",
]
