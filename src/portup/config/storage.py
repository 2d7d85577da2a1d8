"""Where portup keeps its state: the data directory and the status database."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .env import optional_env_var

APP_DIR_NAME: Final[str] = "portup"
STATUS_DB_FILENAME: Final[str] = "portup.db"
PORTS_DIR_NAME: Final[str] = "ports"
BUILDTREES_DIR_NAME: Final[str] = "buildtrees"


def platform_data_home() -> Path:
    """``%LOCALAPPDATA%`` on Windows, ``$XDG_DATA_HOME`` or ``~/.local/share`` elsewhere."""

    if sys.platform.startswith("win"):
        return Path(os.getenv("LOCALAPPDATA") or Path.home() / "AppData" / "Local")
    return Path(os.getenv("XDG_DATA_HOME") or Path.home() / ".local" / "share")


@dataclass(frozen=True, slots=True)
class StorageConfig:
    data_dir: Path

    @property
    def root(self) -> Path:
        return self.data_dir.expanduser().resolve()

    def status_database_uri(self) -> str:
        """SQLite URI of the status database; creates the data directory if needed."""

        self.root.mkdir(parents=True, exist_ok=True)
        return f"sqlite+pysqlite:///{self.root / STATUS_DB_FILENAME}"


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str


def get_storage_config() -> StorageConfig:
    data_dir = optional_env_var("PORTUP_DATA_DIR")
    if data_dir is None:
        return StorageConfig(data_dir=platform_data_home() / APP_DIR_NAME)
    return StorageConfig(data_dir=Path(data_dir))


def get_database_config(*, storage: StorageConfig | None = None) -> DatabaseConfig:
    """``DATABASE_URI`` if set, else the SQLite file inside the data directory."""

    uri = optional_env_var("DATABASE_URI")
    if uri is None:
        uri = (storage or get_storage_config()).status_database_uri()
    return DatabaseConfig(uri=uri)
