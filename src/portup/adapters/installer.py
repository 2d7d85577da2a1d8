"""Installer that runs the build and remove commands listed in port files."""

from __future__ import annotations

import logging
import os
import shlex
import shutil
import subprocess
from typing import TYPE_CHECKING

from portup.domain.upgrade import ActionFailedError

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence
    from pathlib import Path

    from portup.domain.model import PackageSpec
    from portup.domain.ports.definitions import DefinitionProvider
    from portup.domain.upgrade import BuildOptions, InstallAction, RemoveAction

log = logging.getLogger(__name__)

_OUTPUT_TAIL_LINES = 20


class SubprocessInstaller:
    """Runs port commands in the package's port directory.

    Commands see the variables ``PORTUP_PACKAGE``, ``PORTUP_VERSION``,
    ``PORTUP_TRIPLET``, ``PORTUP_BUILDTREE``, ``PORTUP_ALLOW_DOWNLOADS`` and
    ``PORTUP_USE_HEAD`` on top of the inherited environment.
    """

    def __init__(
        self,
        *,
        ports_dir: Path,
        buildtrees_dir: Path,
        definitions: DefinitionProvider,
    ) -> None:
        self.ports_dir = ports_dir
        self.buildtrees_dir = buildtrees_dir
        self._definitions = definitions

    def buildtree_for(self, spec: PackageSpec) -> Path:
        return self.buildtrees_dir / spec.name / spec.triplet

    def install(self, action: InstallAction) -> None:
        definition = action.definition
        buildtree = self.buildtree_for(action.spec)
        try:
            buildtree.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            message = f"cannot create build tree {buildtree}: {exc}"
            raise ActionFailedError(action.spec, message) from exc
        env = self._environment(
            action.spec,
            version=definition.version,
            buildtree=buildtree,
            options=action.build_options,
        )
        for command in definition.build:
            self._run(action.spec, command, env=env)

        if action.build_options.clean_buildtrees:
            log.debug("Removing build tree %s", buildtree)
            shutil.rmtree(buildtree, ignore_errors=True)

    def remove(self, action: RemoveAction) -> None:
        definition = self._definitions.lookup(action.spec.name)
        if definition is None or not definition.remove:
            log.debug("No remove commands for %s", action.spec)
            return
        env = self._environment(
            action.spec,
            version=action.installed_version or definition.version,
            buildtree=self.buildtree_for(action.spec),
        )
        for command in definition.remove:
            self._run(action.spec, command, env=env)

    def _environment(
        self,
        spec: PackageSpec,
        *,
        version: str,
        buildtree: Path,
        options: BuildOptions | None = None,
    ) -> dict[str, str]:
        env = dict(os.environ)
        env.update(
            {
                "PORTUP_PACKAGE": spec.name,
                "PORTUP_VERSION": version,
                "PORTUP_TRIPLET": spec.triplet,
                "PORTUP_BUILDTREE": str(buildtree),
            }
        )
        if options is not None:
            env["PORTUP_ALLOW_DOWNLOADS"] = "1" if options.allow_downloads else "0"
            env["PORTUP_USE_HEAD"] = "1" if options.use_head_version else "0"
        return env

    def _run(self, spec: PackageSpec, command: Sequence[str], *, env: Mapping[str, str]) -> None:
        cwd = self.ports_dir / spec.name
        log.info("[%s] %s", spec, shlex.join(command))
        try:
            completed = subprocess.run(  # noqa: S603
                list(command),
                cwd=cwd,
                env=dict(env),
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as exc:
            raise ActionFailedError(spec, f"cannot run {command[0]}: {exc}") from exc

        if completed.returncode != 0:
            output = (completed.stderr or completed.stdout or "").strip().splitlines()
            tail = "\n".join(output[-_OUTPUT_TAIL_LINES:])
            message = f"{shlex.join(command)} exited with status {completed.returncode}"
            raise ActionFailedError(spec, f"{message}\n{tail}" if tail else message)
