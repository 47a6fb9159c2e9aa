from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy import inspect, text

from ldapmerge.adapters.sqlalchemy import (
    StartupError,
    create_database_engine,
    shutdown,
    startup,
)
from ldapmerge.config.storage import get_database_config

if TYPE_CHECKING:
    from pathlib import Path

    from ldapmerge.adapters.sqlalchemy import Database


def test_startup_migrates_file_database_with_wal(tmp_path: Path) -> None:
    config = get_database_config(database_path=tmp_path / "x" / "data.db")
    database = startup(database_uri=config.uri)
    try:
        tables = set(inspect(database.engine).get_table_names())
        with database.engine.connect() as connection:
            journal_mode = connection.execute(text("PRAGMA journal_mode")).scalar_one()
            foreign_keys = connection.execute(text("PRAGMA foreign_keys")).scalar_one()
    finally:
        shutdown(database)

    assert {"history", "nsx_configs", "alembic_version"} <= tables
    assert str(journal_mode).lower() == "wal"
    assert foreign_keys == 1
    assert (tmp_path / "x" / "data.db").exists()


def test_startup_is_repeatable_on_same_engine() -> None:
    engine = create_database_engine("sqlite+pysqlite:///:memory:")
    first = startup(engine=engine)
    second = startup(engine=engine)

    assert second.engine is first.engine
    shutdown(second)


def test_default_database_lives_in_data_dir(tmp_path: Path) -> None:
    expected = tmp_path.resolve() / "data" / "data.db"
    assert get_database_config().uri == f"sqlite+pysqlite:///{expected}"


def test_repositories_require_an_open_unit_of_work(database: Database) -> None:
    uow = database.unit_of_work()

    with pytest.raises(StartupError):
        _ = uow.repositories

    with uow:
        assert uow.repositories.history.count() == 0

    with pytest.raises(StartupError):
        _ = uow.session
