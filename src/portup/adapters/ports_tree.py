"""Package definitions read from a local ports tree.

Each package lives in ``<ports_dir>/<name>/port.toml``::

    version = "1.3.1"
    description = "Compression library"
    dependencies = ["libfoo"]
    build = [["cmake", "-B", "build"], ["cmake", "--build", "build"]]
    remove = [["./uninstall.sh"]]
"""

from __future__ import annotations

import logging
import re
import tomllib
from pathlib import Path
from typing import Any, Final, cast

from portup.domain.model import Definition

PORT_FILENAME: Final[str] = "port.toml"
_PACKAGE_NAME: Final = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")

log = logging.getLogger(__name__)


class DefinitionError(ValueError):
    """Raised when a port file exists but does not describe a valid definition."""


class PortsTreeDefinitionProvider:
    """Looks up definitions by package name, caching every result for the run."""

    def __init__(self, ports_dir: Path) -> None:
        self.ports_dir = ports_dir
        self._cache: dict[str, Definition | None] = {}

    def port_dir(self, name: str) -> Path:
        return self.ports_dir / name

    def lookup(self, name: str) -> Definition | None:
        if name not in self._cache:
            self._cache[name] = self._lookup_uncached(name)
        return self._cache[name]

    def load(self, name: str) -> Definition:
        """Parse the port file for ``name``; raise ``DefinitionError`` if it is unusable."""

        path = self.port_dir(name) / PORT_FILENAME
        try:
            with path.open("rb") as handle:
                document = tomllib.load(handle)
        except FileNotFoundError as exc:
            raise DefinitionError(f"No port file for {name} at {path}") from exc
        except (OSError, tomllib.TOMLDecodeError) as exc:
            raise DefinitionError(f"Cannot read port file {path}: {exc}") from exc
        return parse_definition(name, document)

    def _lookup_uncached(self, name: str) -> Definition | None:
        if not (self.port_dir(name) / PORT_FILENAME).is_file():
            log.debug("No port file for %s", name)
            return None
        try:
            return self.load(name)
        except DefinitionError as exc:
            log.warning("Ignoring invalid definition for %s: %s", name, exc)
            return None


def parse_definition(name: str, document: dict[str, Any]) -> Definition:
    declared_name = document.get("name", name)
    if declared_name != name:
        raise DefinitionError(f"Port file for {name} declares name {declared_name!r}")

    version = document.get("version")
    if not isinstance(version, str) or not version.strip():
        raise DefinitionError(f"Port file for {name} has no version")

    description = document.get("description", "")
    if not isinstance(description, str):
        raise DefinitionError(f"Port file for {name} has a non-string description")

    dependencies = _string_list(name, "dependencies", document.get("dependencies", []))
    invalid = [dependency for dependency in dependencies if not _PACKAGE_NAME.match(dependency)]
    if invalid:
        raise DefinitionError(f"Port file for {name} names invalid dependencies: {invalid}")

    return Definition(
        name=name,
        version=version.strip(),
        dependencies=dependencies,
        description=description,
        build=_command_list(name, "build", document.get("build", [])),
        remove=_command_list(name, "remove", document.get("remove", [])),
    )


def _string_list(name: str, key: str, value: object) -> tuple[str, ...]:
    if not isinstance(value, list):
        raise DefinitionError(f"Port file for {name}: {key} must be a list of strings")
    items = cast(list[object], value)
    if not all(isinstance(item, str) and item for item in items):
        raise DefinitionError(f"Port file for {name}: {key} must be a list of strings")
    return tuple(cast(list[str], items))


def _command_list(name: str, key: str, value: object) -> tuple[tuple[str, ...], ...]:
    if not isinstance(value, list):
        raise DefinitionError(f"Port file for {name}: {key} must be a list of commands")
    commands = cast(list[object], value)
    parsed = tuple(_string_list(name, key, command) for command in commands)
    if any(not command for command in parsed):
        raise DefinitionError(f"Port file for {name}: {key} contains an empty command")
    return parsed
