"""SQLAlchemy engine lifecycle and units of work for the local store."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine, event, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from ldapmerge.adapters.sqlalchemy.migrations import upgrade_head
from ldapmerge.adapters.sqlalchemy.repositories import (
    SqlAlchemyConnectionProfileRepository,
    SqlAlchemyHistoryRepository,
)
from ldapmerge.config.storage import get_database_config
from ldapmerge.domain.ports.unit_of_work import StoreRepositories

if TYPE_CHECKING:
    from sqlite3 import Connection as SQLiteConnection
    from types import TracebackType

    from sqlalchemy.engine import URL, Engine
    from sqlalchemy.pool import ConnectionPoolEntry

log = getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when a unit of work is used outside its ``with`` block or after shutdown."""


def is_memory_database(url: URL) -> bool:
    return url.get_backend_name() == "sqlite" and url.database in (None, "", ":memory:")


def create_database_engine(database_uri: str) -> Engine:
    """Create an engine; SQLite connections get foreign keys and (for files) WAL."""

    url = make_url(database_uri)
    if url.get_backend_name() != "sqlite":
        return create_engine(url)

    memory = is_memory_database(url)
    connect_args = {"check_same_thread": False}
    if memory:
        # In-memory databases live on a single shared connection.
        engine = create_engine(url, connect_args=connect_args, poolclass=StaticPool)
    else:
        engine = create_engine(url, connect_args=connect_args)
    _install_sqlite_pragmas(engine, wal=not memory)
    return engine


def _install_sqlite_pragmas(engine: Engine, *, wal: bool) -> None:
    @event.listens_for(engine, "connect")
    def _on_connect(  # pyright: ignore[reportUnusedFunction]
        dbapi_connection: SQLiteConnection, _record: ConnectionPoolEntry
    ) -> None:
        cursor = dbapi_connection.cursor()
        try:
            cursor.execute("PRAGMA foreign_keys=ON")
            if wal:
                cursor.execute("PRAGMA journal_mode=WAL")
        finally:
            cursor.close()


@dataclass(slots=True)
class Database:
    """An initialised store: the engine plus the session factory bound to it."""

    engine: Engine
    session_factory: sessionmaker[Session]

    def unit_of_work(self) -> SqlAlchemyStoreUnitOfWork:
        return SqlAlchemyStoreUnitOfWork(self.session_factory)

    def dispose(self) -> None:
        self.engine.dispose()


def startup(*, engine: Engine | None = None, database_uri: str | None = None) -> Database:
    """Create (or adopt) an engine, migrate it to the latest schema and wrap it."""

    resolved_engine = engine or create_database_engine(
        database_uri or get_database_config().uri
    )
    upgrade_head(engine=resolved_engine)
    log.debug("Database ready at %s", resolved_engine.url.render_as_string(hide_password=True))
    return Database(
        engine=resolved_engine,
        session_factory=sessionmaker(bind=resolved_engine, expire_on_commit=False),
    )


def shutdown(database: Database) -> None:
    database.dispose()


class SqlAlchemyStoreUnitOfWork:
    """One session and transaction over the history and connection-profile tables."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self.session_factory = session_factory
        self._session: Session | None = None
        self._repositories: StoreRepositories | None = None

    def __enter__(self) -> SqlAlchemyStoreUnitOfWork:
        if self._session is not None:
            raise StartupError("Unit of work is already open")
        self._session = self.session_factory()
        self._repositories = StoreRepositories(
            history=SqlAlchemyHistoryRepository(self._session),
            profiles=SqlAlchemyConnectionProfileRepository(self._session),
        )
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        session = self.session
        try:
            if exc_type is not None:
                session.rollback()
        finally:
            session.close()
            self._session = None
            self._repositories = None
        return False

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()

    @property
    def repositories(self) -> StoreRepositories:
        if self._repositories is None:
            raise StartupError("Unit of work used outside its with block")
        return self._repositories

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work used outside its with block")
        return self._session
