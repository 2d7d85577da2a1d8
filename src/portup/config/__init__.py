"""Application configuration helpers."""

from __future__ import annotations

from .env import env_list, optional_env_var
from .errors import ConfigurationError
from .logging import configure_logging
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config
from .upgrade import DEFAULT_TRIPLETS, UpgradeConfig, get_upgrade_config, host_triplet

__all__ = [
    "DEFAULT_TRIPLETS",
    "ConfigurationError",
    "DatabaseConfig",
    "StorageConfig",
    "UpgradeConfig",
    "configure_logging",
    "env_list",
    "get_database_config",
    "get_storage_config",
    "get_upgrade_config",
    "host_triplet",
    "optional_env_var",
]
