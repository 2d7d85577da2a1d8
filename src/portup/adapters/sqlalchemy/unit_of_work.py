"""Engine lifecycle and the unit of work over the status database."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine, make_url
from sqlalchemy.orm import Session, sessionmaker

from portup.adapters.sqlalchemy.mappings import create_all_tables
from portup.adapters.sqlalchemy.repositories import SqlAlchemyInstalledPackageRepository
from portup.config import get_database_config
from portup.domain.ports.unit_of_work import StatusRepositories

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when the status database is used before ``startup`` or started twice."""


@dataclass(slots=True)
class _EngineState:
    engine: Engine | None = None
    session_factory: sessionmaker[Session] | None = None


_state = _EngineState()


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> Engine:
    """Bind the adapter to ``engine`` (or a new one for ``database_uri``) and create tables.

    Without either argument the URI comes from :func:`get_database_config`.
    """

    if _state.engine is not None and not force:
        raise StartupError("Status database already initialised; pass force=True to rebind it")

    if engine is None:
        uri = database_uri or get_database_config().uri
        log.debug("Opening status database %s", make_url(uri).render_as_string(hide_password=True))
        engine = create_engine(uri)

    create_all_tables(engine)
    _state.engine = engine
    _state.session_factory = sessionmaker(bind=engine, expire_on_commit=False)
    return engine


def configured_engine() -> Engine | None:
    return _state.engine


def is_started() -> bool:
    return _state.engine is not None


def shutdown() -> None:
    """Dispose the bound engine; ``startup`` may be called again afterwards."""

    if _state.engine is not None:
        _state.engine.dispose()
    _state.engine = None
    _state.session_factory = None


def _session_factory() -> sessionmaker[Session]:
    if _state.session_factory is None:
        raise StartupError(
            "Status database not initialised; call "
            "portup.adapters.sqlalchemy.startup() before opening a unit of work"
        )
    return _state.session_factory


class SqlAlchemyStatusUnitOfWork:
    """One session over the status database, used as a context manager."""

    def __init__(self) -> None:
        self._session_factory = _session_factory()
        self._session: Session | None = None
        self._repositories: StatusRepositories | None = None

    def __enter__(self) -> SqlAlchemyStatusUnitOfWork:
        if self._session is not None:
            raise StartupError("Unit of work is already in use")
        self._session = self._session_factory()
        self._repositories = StatusRepositories(
            installed=SqlAlchemyInstalledPackageRepository(self._session)
        )
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        session = self._require_session()
        try:
            if exc_type is not None:
                session.rollback()
        finally:
            session.close()
            self._session = None
            self._repositories = None
        return False

    @property
    def repositories(self) -> StatusRepositories:
        if self._repositories is None:
            raise StartupError("Unit of work session not initialised; enter the context first")
        return self._repositories

    def commit(self) -> None:
        self._require_session().commit()

    def rollback(self) -> None:
        self._require_session().rollback()

    def _require_session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work session not initialised; enter the context first")
        return self._session


if TYPE_CHECKING:
    from portup.domain.ports.unit_of_work import StatusUnitOfWork

    _uow_status_check: StatusUnitOfWork = SqlAlchemyStatusUnitOfWork()
