"""Transaction boundary around the installed-package status database."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from types import TracebackType

    from portup.domain.ports.status import InstalledPackageRepository


@dataclass(slots=True)
class StatusRepositories:
    """Repositories reachable inside one status unit of work."""

    installed: InstalledPackageRepository


@runtime_checkable
class StatusUnitOfWork(Protocol):
    """Context manager owning one transaction over the status database.

    Changes become durable on ``commit``. ``rollback`` discards everything
    since the last commit; leaving the context with an exception does the same.
    ``repositories`` is only available while the context is entered.
    """

    @property
    def repositories(self) -> StatusRepositories: ...

    def __enter__(self) -> StatusUnitOfWork: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...
