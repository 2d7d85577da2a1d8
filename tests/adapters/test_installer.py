from __future__ import annotations

import json
import sys
from typing import TYPE_CHECKING

import pytest

from portup.adapters.installer import SubprocessInstaller
from portup.domain.model import Definition
from portup.domain.upgrade import (
    UPGRADE_BUILD_OPTIONS,
    ActionFailedError,
    BuildOptions,
    InstallAction,
    RemoveAction,
)
from tests.helpers.packages import FakeDefinitionProvider, spec

if TYPE_CHECKING:
    from pathlib import Path

DUMP_ENV = (
    "import json, os, pathlib; "
    "pathlib.Path('env.json').write_text(json.dumps("
    "{k: v for k, v in os.environ.items() if k.startswith('PORTUP_')}))"
)
TOUCH_BUILDTREE = (
    "import os, pathlib; pathlib.Path(os.environ['PORTUP_BUILDTREE'], 'built').touch()"
)


def _python(code: str) -> tuple[str, ...]:
    return (sys.executable, "-c", code)


@pytest.fixture
def ports_dir(tmp_path: Path) -> Path:
    path = tmp_path / "ports"
    (path / "zlib").mkdir(parents=True)
    return path


def _installer(
    tmp_path: Path, ports_dir: Path, *definitions: Definition
) -> SubprocessInstaller:
    return SubprocessInstaller(
        ports_dir=ports_dir,
        buildtrees_dir=tmp_path / "buildtrees",
        definitions=FakeDefinitionProvider(definitions),
    )


def test_install_runs_build_commands_in_port_dir_with_environment(
    tmp_path: Path, ports_dir: Path
) -> None:
    installer = _installer(tmp_path, ports_dir)
    definition = Definition(name="zlib", version="1.3", build=(_python(DUMP_ENV),))

    installer.install(
        InstallAction(spec=spec("zlib"), definition=definition, build_options=BuildOptions())
    )

    env = json.loads((ports_dir / "zlib" / "env.json").read_text(encoding="utf-8"))
    assert env == {
        "PORTUP_PACKAGE": "zlib",
        "PORTUP_VERSION": "1.3",
        "PORTUP_TRIPLET": "x64-linux",
        "PORTUP_BUILDTREE": str(tmp_path / "buildtrees" / "zlib" / "x64-linux"),
        "PORTUP_ALLOW_DOWNLOADS": "1",
        "PORTUP_USE_HEAD": "0",
    }


def test_install_keeps_build_tree_unless_asked_to_clean(
    tmp_path: Path, ports_dir: Path
) -> None:
    installer = _installer(tmp_path, ports_dir)
    definition = Definition(name="zlib", version="1.3", build=(_python(TOUCH_BUILDTREE),))
    buildtree = installer.buildtree_for(spec("zlib"))

    installer.install(
        InstallAction(spec=spec("zlib"), definition=definition, build_options=BuildOptions())
    )
    assert (buildtree / "built").is_file()

    installer.install(
        InstallAction(
            spec=spec("zlib"), definition=definition, build_options=UPGRADE_BUILD_OPTIONS
        )
    )
    assert not buildtree.exists()


def test_failing_build_command_raises_with_output_tail(tmp_path: Path, ports_dir: Path) -> None:
    installer = _installer(tmp_path, ports_dir)
    failing = _python("import sys; print('compiler exploded', file=sys.stderr); sys.exit(2)")
    never_run = _python(DUMP_ENV)
    definition = Definition(name="zlib", version="1.3", build=(failing, never_run))

    with pytest.raises(ActionFailedError) as excinfo:
        installer.install(InstallAction(spec=spec("zlib"), definition=definition))

    assert excinfo.value.spec == spec("zlib")
    assert "exited with status 2" in str(excinfo.value)
    assert "compiler exploded" in str(excinfo.value)
    assert not (ports_dir / "zlib" / "env.json").exists()


def test_missing_executable_raises_action_failed(tmp_path: Path, ports_dir: Path) -> None:
    installer = _installer(tmp_path, ports_dir)
    definition = Definition(
        name="zlib", version="1.3", build=((str(tmp_path / "no-such-tool"),),)
    )

    with pytest.raises(ActionFailedError, match="cannot run"):
        installer.install(InstallAction(spec=spec("zlib"), definition=definition))


def test_remove_runs_definition_commands_with_installed_version(
    tmp_path: Path, ports_dir: Path
) -> None:
    installer = _installer(
        tmp_path,
        ports_dir,
        Definition(name="zlib", version="1.3", remove=(_python(DUMP_ENV),)),
    )

    installer.remove(RemoveAction(spec=spec("zlib"), installed_version="1.2"))

    env = json.loads((ports_dir / "zlib" / "env.json").read_text(encoding="utf-8"))
    assert env["PORTUP_PACKAGE"] == "zlib"
    assert env["PORTUP_VERSION"] == "1.2"
    assert "PORTUP_ALLOW_DOWNLOADS" not in env


def test_remove_without_definition_is_a_no_op(tmp_path: Path, ports_dir: Path) -> None:
    installer = _installer(tmp_path, ports_dir)

    installer.remove(RemoveAction(spec=spec("ghost")))

    assert not (tmp_path / "buildtrees").exists()


def test_unusable_build_tree_location_raises_action_failed(
    tmp_path: Path, ports_dir: Path
) -> None:
    buildtrees = tmp_path / "buildtrees"
    buildtrees.write_text("not a directory", encoding="utf-8")
    installer = _installer(tmp_path, ports_dir)
    definition = Definition(name="zlib", version="1.3", build=(_python(DUMP_ENV),))

    with pytest.raises(ActionFailedError, match="cannot create build tree") as excinfo:
        installer.install(InstallAction(spec=spec("zlib"), definition=definition))

    assert excinfo.value.spec == spec("zlib")
    assert not (ports_dir / "zlib" / "env.json").exists()
