"""Alembic environment for the history and connection-profile store.

``upgrade_head`` hands over an open connection through
``config.attributes["connection"]``. Running ``alembic`` by hand connects to
the configured database instead.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from alembic import context
from sqlalchemy import create_engine, pool

from ldapmerge.adapters.sqlalchemy.tables import metadata
from ldapmerge.config.storage import get_database_config

if TYPE_CHECKING:
    from sqlalchemy.engine import Connection

config = context.config

# SQLite cannot ALTER most columns in place.
MIGRATION_OPTIONS = {"target_metadata": metadata, "render_as_batch": True, "compare_type": True}


def _database_url() -> str:
    return config.get_main_option("sqlalchemy.url") or get_database_config().uri


def _migrate(connection: Connection) -> None:
    context.configure(connection=connection, **MIGRATION_OPTIONS)
    with context.begin_transaction():
        context.run_migrations()


def run_offline() -> None:
    context.configure(url=_database_url(), literal_binds=True, **MIGRATION_OPTIONS)
    with context.begin_transaction():
        context.run_migrations()


def run_online() -> None:
    connection = config.attributes.get("connection")
    if connection is not None:
        _migrate(connection)
        return
    engine = create_engine(_database_url(), poolclass=pool.NullPool)
    try:
        with engine.connect() as own_connection:
            _migrate(own_connection)
    finally:
        engine.dispose()


if context.is_offline_mode():
    run_offline()
else:
    run_online()
