"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

import json
from dataclasses import replace
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.exc import IntegrityError

from ldapmerge.adapters.sqlalchemy.tables import history_table, nsx_config_table
from ldapmerge.domain.model import ConnectionProfile, HistoryEntry
from ldapmerge.domain.ports.persistence import (
    DEFAULT_HISTORY_LIMIT,
    DuplicateRecordError,
    RecordNotFoundError,
)

if TYPE_CHECKING:
    from sqlalchemy import ColumnElement, Row
    from sqlalchemy.orm import Session


def _utcnow() -> datetime:
    # SQLite DATETIME columns are naive; everything stored is UTC.
    return datetime.now(UTC).replace(tzinfo=None)


def _as_utc(value: datetime | None) -> datetime | None:
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


class SqlAlchemyHistoryRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entry: HistoryEntry) -> HistoryEntry:
        created_at = _utcnow()
        result = self.session.execute(
            insert(history_table).values(
                created_at=created_at,
                initial=json.dumps(entry.initial),
                response=json.dumps(entry.response),
                result=json.dumps(entry.result),
            )
        )
        (entry_id,) = result.inserted_primary_key or (None,)
        return replace(entry, id=entry_id, created_at=_as_utc(created_at))

    def get(self, entry_id: int) -> HistoryEntry:
        stmt = select(history_table).where(history_table.c.id == entry_id)
        row = self.session.execute(stmt).one_or_none()
        if row is None:
            raise RecordNotFoundError("history entry", entry_id)
        return _history_from_row(row)

    def list_recent(self, *, limit: int = DEFAULT_HISTORY_LIMIT) -> list[HistoryEntry]:
        stmt = (
            select(history_table)
            .order_by(history_table.c.created_at.desc(), history_table.c.id.desc())
            .limit(limit)
        )
        return [_history_from_row(row) for row in self.session.execute(stmt)]

    def count(self) -> int:
        return self.session.execute(select(func.count()).select_from(history_table)).scalar_one()


def _history_from_row(row: Row[tuple[object, ...]]) -> HistoryEntry:
    mapping = row._mapping  # noqa: SLF001
    return HistoryEntry(
        id=mapping["id"],
        created_at=_as_utc(mapping["created_at"]),
        initial=json.loads(mapping["initial"]),
        response=json.loads(mapping["response"]),
        result=json.loads(mapping["result"]),
    )


class SqlAlchemyConnectionProfileRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def save(self, profile: ConnectionProfile) -> ConnectionProfile:
        """Insert a profile without an id, update the stored one otherwise."""

        now = _utcnow()
        values = {
            "name": profile.name,
            "description": profile.description,
            "host": profile.host,
            "username": profile.username,
            "password": profile.password,
            "insecure": profile.insecure,
        }
        try:
            if profile.id is None:
                result = self.session.execute(
                    insert(nsx_config_table).values(**values, created_at=now, updated_at=now)
                )
                (profile_id,) = result.inserted_primary_key or (None,)
                return replace(
                    profile, id=profile_id, created_at=_as_utc(now), updated_at=_as_utc(now)
                )
            result = self.session.execute(
                update(nsx_config_table)
                .where(nsx_config_table.c.id == profile.id)
                .values(**values, updated_at=now)
            )
        except IntegrityError as exc:
            raise DuplicateRecordError("connection profile", profile.name) from exc
        if result.rowcount == 0:
            raise RecordNotFoundError("connection profile", profile.id)
        return self.get(profile.id)

    def get(self, profile_id: int) -> ConnectionProfile:
        return self._one(nsx_config_table.c.id == profile_id, profile_id)

    def get_by_name(self, name: str) -> ConnectionProfile:
        return self._one(nsx_config_table.c.name == name, name)

    def list_all(self) -> list[ConnectionProfile]:
        """Return every profile ordered by name, with passwords blanked."""

        stmt = select(nsx_config_table).order_by(nsx_config_table.c.name)
        return [_profile_from_row(row).redacted() for row in self.session.execute(stmt)]

    def delete(self, profile_id: int) -> None:
        result = self.session.execute(
            delete(nsx_config_table).where(nsx_config_table.c.id == profile_id)
        )
        if result.rowcount == 0:
            raise RecordNotFoundError("connection profile", profile_id)

    def count(self) -> int:
        return self.session.execute(
            select(func.count()).select_from(nsx_config_table)
        ).scalar_one()

    def _one(self, condition: ColumnElement[bool], key: object) -> ConnectionProfile:
        row = self.session.execute(select(nsx_config_table).where(condition)).one_or_none()
        if row is None:
            raise RecordNotFoundError("connection profile", key)
        return _profile_from_row(row)


def _profile_from_row(row: Row[tuple[object, ...]]) -> ConnectionProfile:
    mapping = row._mapping  # noqa: SLF001
    return ConnectionProfile(
        id=mapping["id"],
        name=mapping["name"],
        description=mapping["description"] or "",
        host=mapping["host"],
        username=mapping["username"],
        password=mapping["password"] or "",
        insecure=bool(mapping["insecure"]),
        created_at=_as_utc(mapping["created_at"]),
        updated_at=_as_utc(mapping["updated_at"]),
    )
