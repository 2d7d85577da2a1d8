from __future__ import annotations

from portup.domain.model import StatusSnapshot
from portup.domain.upgrade import OutdatedPackage, find_outdated_packages
from tests.helpers.packages import FakeDefinitionProvider, definition, installed, spec


def test_finds_every_installed_package_with_a_different_version() -> None:
    status = StatusSnapshot(
        [
            installed("zlib", "1.2"),
            installed("zlib", "1.2", triplet="x64-osx"),
            installed("curl", "8.0"),
            installed("legacy", "0.1"),
        ]
    )
    definitions = FakeDefinitionProvider([definition("zlib", "1.3"), definition("curl", "8.0")])

    outdated = find_outdated_packages(status=status, definitions=definitions)

    assert outdated == (
        OutdatedPackage(spec=spec("zlib"), installed_version="1.2", available_version="1.3"),
        OutdatedPackage(
            spec=spec("zlib", "x64-osx"), installed_version="1.2", available_version="1.3"
        ),
    )


def test_nothing_outdated_when_versions_match() -> None:
    status = StatusSnapshot([installed("curl", "8.0")])
    definitions = FakeDefinitionProvider([definition("curl", "8.0")])

    assert find_outdated_packages(status=status, definitions=definitions) == ()


def test_empty_status_has_nothing_outdated() -> None:
    definitions = FakeDefinitionProvider([definition("curl", "8.0")])

    assert find_outdated_packages(status=StatusSnapshot(), definitions=definitions) == ()
    assert definitions.lookups == []
