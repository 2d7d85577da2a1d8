"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import delete, insert, select

from portup.adapters.sqlalchemy.mappings import installed_package_table
from portup.domain.model import InstalledRecord, PackageSpec

if TYPE_CHECKING:
    from sqlalchemy import Row
    from sqlalchemy.orm import Session


class SqlAlchemyInstalledPackageRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, spec: PackageSpec) -> InstalledRecord | None:
        stmt = (
            select(installed_package_table)
            .where(installed_package_table.c.name == spec.name)
            .where(installed_package_table.c.triplet == spec.triplet)
        )
        row = self.session.execute(stmt).one_or_none()
        return None if row is None else _to_record(row)

    def list_all(self) -> list[InstalledRecord]:
        stmt = select(installed_package_table).order_by(
            installed_package_table.c.name, installed_package_table.c.triplet
        )
        return [_to_record(row) for row in self.session.execute(stmt)]

    def add(self, record: InstalledRecord) -> None:
        """Insert ``record``, replacing any existing row for the same spec."""

        self.remove(record.spec)
        self.session.execute(
            insert(installed_package_table).values(
                name=record.spec.name,
                triplet=record.spec.triplet,
                version=record.version,
                dependencies=record.dependencies,
                installed_at=record.installed_at,
            )
        )

    def remove(self, spec: PackageSpec) -> None:
        self.session.execute(
            delete(installed_package_table)
            .where(installed_package_table.c.name == spec.name)
            .where(installed_package_table.c.triplet == spec.triplet)
        )


def _to_record(row: Row[Any]) -> InstalledRecord:
    mapping = row._mapping  # noqa: SLF001
    return InstalledRecord(
        spec=PackageSpec(name=str(mapping["name"]), triplet=str(mapping["triplet"])),
        version=str(mapping["version"]),
        dependencies=tuple(mapping["dependencies"]),
        installed_at=mapping["installed_at"],
    )
