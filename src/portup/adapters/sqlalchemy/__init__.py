"""SQLAlchemy adapter package for the installed-package status database."""

from __future__ import annotations

from .mappings import create_all_tables, installed_package_table, metadata
from .repositories import SqlAlchemyInstalledPackageRepository
from .unit_of_work import (
    SqlAlchemyStatusUnitOfWork,
    StartupError,
    configured_engine,
    is_started,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyInstalledPackageRepository",
    "SqlAlchemyStatusUnitOfWork",
    "StartupError",
    "configured_engine",
    "create_all_tables",
    "installed_package_table",
    "is_started",
    "metadata",
    "shutdown",
    "startup",
]
