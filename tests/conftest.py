from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002
from sqlalchemy.orm import Session, sessionmaker

from portup.adapters.sqlalchemy import create_all_tables
from portup.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyStatusUnitOfWork,
    shutdown,
    startup,
)
from portup.config import UpgradeConfig

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator
    from pathlib import Path


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    create_all_tables(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlite_session(sqlite_engine: Engine) -> Iterator[Session]:
    session_factory = sessionmaker(bind=sqlite_engine, future=True)
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def sqlite_unit_of_work(
    sqlite_engine: Engine,
) -> Iterator[Callable[[], SqlAlchemyStatusUnitOfWork]]:
    startup(engine=sqlite_engine, force=True)

    def factory() -> SqlAlchemyStatusUnitOfWork:
        return SqlAlchemyStatusUnitOfWork()

    try:
        yield factory
    finally:
        shutdown()


@pytest.fixture
def upgrade_config(tmp_path: Path) -> UpgradeConfig:
    return UpgradeConfig(
        ports_dir=tmp_path / "ports",
        buildtrees_dir=tmp_path / "buildtrees",
        default_triplet="x64-linux",
    )
