"""Dry-run gate and failure-tolerance policy."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class GateMode(StrEnum):
    PREVIEW = "preview"
    COMMIT = "commit"


class FailurePolicy(StrEnum):
    STOP_ON_FIRST_FAILURE = "stop_on_first_failure"
    CONTINUE_ON_FAILURE = "continue_on_failure"

    @classmethod
    def from_keep_going(cls, keep_going: bool) -> FailurePolicy:  # noqa: FBT001
        return cls.CONTINUE_ON_FAILURE if keep_going else cls.STOP_ON_FIRST_FAILURE


@dataclass(frozen=True, slots=True)
class DryRunGate:
    """Decides whether a rendered plan is also executed.

    The mode is fixed when the run starts and never depends on plan contents.
    """

    mode: GateMode = GateMode.PREVIEW

    @classmethod
    def from_confirmation(cls, confirmed: bool) -> DryRunGate:  # noqa: FBT001
        return cls(GateMode.COMMIT if confirmed else GateMode.PREVIEW)

    @property
    def commits(self) -> bool:
        return self.mode is GateMode.COMMIT
