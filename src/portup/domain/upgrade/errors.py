"""Error taxonomy of the upgrade workflow."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from portup.domain.model import PackageSpec


class UpgradeError(RuntimeError):
    """Base class for failures raised by the upgrade workflow."""


class InvalidSpecsError(UpgradeError):
    """Raised when requested specs are not installed or have no valid definition."""

    def __init__(
        self,
        *,
        not_installed: Sequence[PackageSpec] = (),
        no_definition: Sequence[PackageSpec] = (),
    ) -> None:
        self.not_installed = tuple(sorted(not_installed))
        self.no_definition = tuple(sorted(no_definition))
        parts: list[str] = []
        if self.not_installed:
            parts.append("not installed: " + ", ".join(map(str, self.not_installed)))
        if self.no_definition:
            parts.append("no valid definition: " + ", ".join(map(str, self.no_definition)))
        super().__init__("Cannot upgrade packages (" + "; ".join(parts) + ")")


class EmptyPlanError(UpgradeError):
    """Raised when planning yields no actions even though upgrades were requested."""


class PlanResolutionError(UpgradeError):
    """Raised by resolvers when a dependency closure cannot be ordered."""


class ActionFailedError(UpgradeError):
    """Raised by installers when a single plan action did not complete."""

    def __init__(self, spec: PackageSpec, message: str) -> None:
        self.spec = spec
        super().__init__(f"{spec}: {message}")
