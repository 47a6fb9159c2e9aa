from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from ldapmerge.adapters.sqlalchemy import database_info, format_bytes, shutdown, startup
from ldapmerge.config.storage import get_database_config
from ldapmerge.domain.model import ConnectionProfile, HistoryEntry

if TYPE_CHECKING:
    from pathlib import Path

    from ldapmerge.adapters.sqlalchemy import Database


@pytest.mark.parametrize(
    ("size", "expected"),
    [(0, "0 B"), (1023, "1023 B"), (1024, "1.0 KB"), (45056, "44.0 KB"), (5 * 1024**2, "5.0 MB")],
)
def test_format_bytes(size: int, expected: str) -> None:
    assert format_bytes(size) == expected


def test_database_info_counts_records(database: Database) -> None:
    with database.unit_of_work() as uow:
        uow.repositories.history.add(HistoryEntry(initial=[], response={}, result=[]))
        uow.repositories.profiles.save(
            ConnectionProfile(name="lab", host="https://nsx", username="admin")
        )
        uow.commit()

    info = database_info(database)

    assert info.path == ":memory:"
    assert info.tables == 2
    assert info.history_count == 1
    assert info.config_count == 1
    assert info.wal_mode is False
    assert info.version.count(".") >= 2


def test_database_info_reports_file_size(tmp_path: Path) -> None:
    path = tmp_path / "data.db"
    database = startup(database_uri=get_database_config(database_path=path).uri)
    try:
        info = database_info(database)
    finally:
        shutdown(database)

    assert info.path == str(path.resolve())
    assert info.size > 0
    assert info.wal_mode is True
