"""SQLAlchemy Core tables for the local history and profile store."""

from __future__ import annotations

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    func,
)

metadata = MetaData()

history_table = Table(
    "history",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("created_at", DateTime, nullable=False, server_default=func.current_timestamp()),
    Column("initial", Text, nullable=False),
    Column("response", Text, nullable=False),
    Column("result", Text, nullable=False),
)
Index("idx_history_created_at", history_table.c.created_at.desc())

nsx_config_table = Table(
    "nsx_configs",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(255), nullable=False, unique=True),
    Column("description", Text, nullable=False, server_default=""),
    Column("host", Text, nullable=False),
    Column("username", Text, nullable=False),
    Column("password", Text, nullable=False, server_default=""),
    Column("insecure", Boolean, nullable=False, server_default="0"),
    Column("created_at", DateTime, nullable=False, server_default=func.current_timestamp()),
    Column("updated_at", DateTime, nullable=False, server_default=func.current_timestamp()),
)
Index("idx_nsx_configs_name", nsx_config_table.c.name)

APPLICATION_TABLES = (history_table, nsx_config_table)
