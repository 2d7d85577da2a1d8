"""Environment variable loaders for configuration."""

from __future__ import annotations

import os


def optional_env_var(name: str) -> str | None:
    """Return a stripped environment variable, treating blank values as unset."""

    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def env_list(name: str) -> tuple[str, ...] | None:
    """Split a comma separated environment variable into its non-empty items."""

    value = optional_env_var(name)
    if value is None:
        return None
    return tuple(item.strip() for item in value.split(",") if item.strip())
