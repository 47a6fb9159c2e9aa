"""SQLAlchemy adapter package for the local history and profile store."""

from __future__ import annotations

from .diagnostics import DatabaseInfo, database_info, format_bytes
from .repositories import SqlAlchemyConnectionProfileRepository, SqlAlchemyHistoryRepository
from .tables import history_table, metadata, nsx_config_table
from .unit_of_work import (
    Database,
    SqlAlchemyStoreUnitOfWork,
    StartupError,
    create_database_engine,
    shutdown,
    startup,
)

__all__ = [
    "Database",
    "DatabaseInfo",
    "SqlAlchemyConnectionProfileRepository",
    "SqlAlchemyHistoryRepository",
    "SqlAlchemyStoreUnitOfWork",
    "StartupError",
    "create_database_engine",
    "database_info",
    "format_bytes",
    "history_table",
    "metadata",
    "nsx_config_table",
    "shutdown",
    "startup",
]
