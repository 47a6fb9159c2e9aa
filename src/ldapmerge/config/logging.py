"""Logging setup shared by the CLI and the HTTP server."""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final

LOG_FILENAME: Final[str] = "ldapmerge.log"
LOG_MAX_BYTES: Final[int] = 100 * 1024 * 1024
LOG_BACKUP_COUNT: Final[int] = 5
TEXT_FORMAT: Final[str] = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

LEVELS: Final[dict[str, int]] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}

_EXTRA_KEYS: Final[tuple[str, ...]] = (
    "command",
    "nsx_host",
    "source_id",
    "dry_run",
    "domains",
    "certificates",
    "succeeded",
    "failed",
    "duration_ms",
)


class JSONFormatter(logging.Formatter):
    """Render records as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in _EXTRA_KEYS:
            value = record.__dict__.get(key)
            if value is not None:
                entry[key] = value
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


def parse_level(name: str | int) -> int:
    if isinstance(name, int):
        return name
    try:
        return LEVELS[name.strip().lower()]
    except KeyError:
        choices = ", ".join(sorted(LEVELS))
        raise ValueError(f"Unknown log level {name!r} (expected one of: {choices})") from None


def configure_logging(
    *,
    level: int | str = logging.INFO,
    log_dir: Path | str | None = None,
    console: bool = False,
    json_format: bool = False,
    force: bool = False,
) -> None:
    """Initialise the root logger.

    With ``log_dir`` set, records go to a size-rotated ``ldapmerge.log`` in JSON
    lines and only reach stderr when ``console`` is also set. Without it, stderr
    is the only sink. Pass ``force=True`` to reconfigure during tests.
    """

    handlers: list[logging.Handler] = []
    if log_dir is not None:
        directory = Path(log_dir).expanduser()
        directory.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            directory / LOG_FILENAME,
            maxBytes=LOG_MAX_BYTES,
            backupCount=LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setFormatter(JSONFormatter())
        handlers.append(file_handler)

    if console or log_dir is None:
        stream_handler = logging.StreamHandler(sys.stderr)
        stream_handler.setFormatter(
            JSONFormatter() if json_format else logging.Formatter(TEXT_FORMAT, datefmt="%H:%M:%S")
        )
        handlers.append(stream_handler)

    logging.basicConfig(level=parse_level(level), handlers=handlers, force=force)
