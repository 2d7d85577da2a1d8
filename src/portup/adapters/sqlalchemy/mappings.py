"""SQLAlchemy table metadata for the installed-package status database."""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, cast

from sqlalchemy import Column, DateTime, Dialect, MetaData, String, Table, TypeDecorator

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


class NameListType(TypeDecorator[tuple[str, ...]]):
    """Stores a sorted tuple of package names as a JSON array."""

    impl = String
    cache_ok = True

    def process_bind_param(self, value: tuple[str, ...] | None, dialect: Dialect) -> str | None:
        _ = dialect
        if value is None:
            return None
        return json.dumps(sorted(set(value)))

    def process_result_value(self, value: str | None, dialect: Dialect) -> tuple[str, ...]:
        _ = dialect
        if value is None:
            return ()
        loaded = json.loads(value)
        if not isinstance(loaded, list):
            return ()
        items = cast(list[Any], loaded)
        return tuple(item for item in items if isinstance(item, str))


metadata = MetaData(
    naming_convention={
        "ix": "ix_%(column_0_label)s",
        "uq": "uq_%(table_name)s_%(column_0_label)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "pk": "pk_%(table_name)s",
    }
)

installed_package_table = Table(
    "installed_package",
    metadata,
    Column("name", String, primary_key=True),
    Column("triplet", String, primary_key=True),
    Column("version", String, nullable=False),
    Column("dependencies", NameListType, nullable=False, default=()),
    Column("installed_at", UTCDateTime, nullable=False),
)


def create_all_tables(engine: Engine) -> None:
    """Create the status tables if they do not exist yet."""

    log.info("Creating status database tables")
    metadata.create_all(engine, checkfirst=True)
