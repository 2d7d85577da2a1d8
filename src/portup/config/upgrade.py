"""Configuration for the upgrade workflow: definition tree, build trees and triplets."""

from __future__ import annotations

import platform
import re
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .env import env_list, optional_env_var
from .errors import ConfigurationError
from .storage import BUILDTREES_DIR_NAME, PORTS_DIR_NAME, StorageConfig, get_storage_config

DEFAULT_TRIPLETS: Final[tuple[str, ...]] = (
    "arm64-linux",
    "arm64-osx",
    "arm64-windows",
    "x64-linux",
    "x64-osx",
    "x64-windows",
    "x86-windows",
)

_TRIPLET_PATTERN: Final = re.compile(r"^[a-z0-9-]+$")


@dataclass(frozen=True, slots=True)
class UpgradeConfig:
    """Locations and target settings used by the upgrade command."""

    ports_dir: Path
    buildtrees_dir: Path
    default_triplet: str
    known_triplets: tuple[str, ...] = DEFAULT_TRIPLETS

    def __post_init__(self) -> None:
        for triplet in (self.default_triplet, *self.known_triplets):
            if not _TRIPLET_PATTERN.match(triplet):
                raise ConfigurationError(f"Invalid triplet name: {triplet!r}")
        if self.default_triplet not in self.known_triplets:
            raise ConfigurationError(
                f"Default triplet {self.default_triplet} is not one of the known triplets"
            )

    def is_known_triplet(self, triplet: str) -> bool:
        return triplet in self.known_triplets


def host_triplet() -> str:
    """Best guess of the triplet matching the running interpreter's platform."""

    machine = platform.machine().lower()
    arch = "arm64" if machine in {"arm64", "aarch64"} else "x64"
    if sys.platform.startswith("win"):
        system = "windows"
    elif sys.platform == "darwin":
        system = "osx"
    else:
        system = "linux"
    return f"{arch}-{system}"


def get_upgrade_config(*, storage: StorageConfig | None = None) -> UpgradeConfig:
    storage_config = storage or get_storage_config()
    data_dir = storage_config.root

    ports_env = optional_env_var("PORTUP_PORTS_DIR")
    buildtrees_env = optional_env_var("PORTUP_BUILDTREES_DIR")
    known = env_list("PORTUP_TRIPLETS") or DEFAULT_TRIPLETS
    default_triplet = optional_env_var("PORTUP_DEFAULT_TRIPLET") or host_triplet()

    return UpgradeConfig(
        ports_dir=Path(ports_env).expanduser() if ports_env else data_dir / PORTS_DIR_NAME,
        buildtrees_dir=(
            Path(buildtrees_env).expanduser() if buildtrees_env else data_dir / BUILDTREES_DIR_NAME
        ),
        default_triplet=default_triplet,
        known_triplets=known,
    )
