"""Store diagnostics reported by the health endpoint."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Final

from sqlalchemy import text

if TYPE_CHECKING:
    from ldapmerge.adapters.sqlalchemy.unit_of_work import Database

_UNITS: Final[str] = "KMGTPE"


@dataclass(frozen=True, slots=True)
class DatabaseInfo:
    path: str
    size: int
    size_human: str
    version: str
    tables: int
    wal_mode: bool
    history_count: int
    config_count: int


def format_bytes(size: int) -> str:
    """Render ``size`` with 1024-based units, e.g. ``45056`` -> ``"44.0 KB"``."""

    if size < 1024:  # noqa: PLR2004
        return f"{size} B"
    divisor, exponent = 1024, 0
    remaining = size // 1024
    while remaining >= 1024:  # noqa: PLR2004
        divisor *= 1024
        exponent += 1
        remaining //= 1024
    return f"{size / divisor:.1f} {_UNITS[exponent]}B"


def database_info(database: Database) -> DatabaseInfo:
    path = database.engine.url.database or ":memory:"
    file_path = Path(path)
    size = file_path.stat().st_size if path != ":memory:" and file_path.exists() else 0

    with database.engine.connect() as connection:
        version = connection.execute(text("SELECT sqlite_version()")).scalar_one()
        journal_mode = connection.execute(text("PRAGMA journal_mode")).scalar_one()
        tables = connection.execute(
            text(
                "SELECT COUNT(*) FROM sqlite_master WHERE type = 'table' "
                "AND name NOT LIKE 'sqlite_%' AND name NOT LIKE 'alembic_%'"
            )
        ).scalar_one()

    with database.unit_of_work() as uow:
        history_count = uow.repositories.history.count()
        config_count = uow.repositories.profiles.count()

    return DatabaseInfo(
        path=path,
        size=size,
        size_human=format_bytes(size),
        version=str(version),
        tables=int(tables),
        wal_mode=str(journal_mode).lower() == "wal",
        history_count=history_count,
        config_count=config_count,
    )
