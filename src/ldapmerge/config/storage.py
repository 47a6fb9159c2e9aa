"""Where the local SQLite store lives."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .env import env_value

APP_DIR_NAME: Final[str] = "ldapmerge"
DEFAULT_DB_FILENAME: Final[str] = "data.db"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    data_dir: Path
    database_filename: str = DEFAULT_DB_FILENAME

    def database_path(self) -> Path:
        """Resolved database file path; the data directory is created if missing."""

        data_dir = self.data_dir.expanduser().resolve()
        data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir / self.database_filename


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str


def sqlite_uri(path: Path | str) -> str:
    return f"sqlite+pysqlite:///{path}"


def _default_data_dir() -> Path:
    # Follows XDG on POSIX and LOCALAPPDATA on Windows.
    if os.name == "nt":
        base = os.getenv("LOCALAPPDATA")
        root = Path(base) if base else Path.home() / "AppData" / "Local"
    else:
        base = os.getenv("XDG_DATA_HOME")
        root = Path(base) if base else Path.home() / ".local" / "share"
    return root / APP_DIR_NAME


def get_storage_config() -> StorageConfig:
    configured = env_value("DATA_DIR")
    return StorageConfig(data_dir=Path(configured) if configured else _default_data_dir())


def get_database_config(
    *,
    storage: StorageConfig | None = None,
    database_path: Path | str | None = None,
) -> DatabaseConfig:
    """Resolve the database URI.

    An explicit ``database_path`` (the ``--db`` flag) wins over
    ``LDAPMERGE_DATABASE_URI``, which wins over the data directory default.
    """

    if database_path is not None:
        path = Path(database_path).expanduser().resolve()
        path.parent.mkdir(parents=True, exist_ok=True)
        return DatabaseConfig(uri=sqlite_uri(path))
    configured_uri = env_value("DATABASE_URI")
    if configured_uri:
        return DatabaseConfig(uri=configured_uri)
    return DatabaseConfig(uri=sqlite_uri((storage or get_storage_config()).database_path()))
