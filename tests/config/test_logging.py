from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

import pytest

from ldapmerge.config import JSONFormatter, configure_logging, parse_level

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path


@pytest.fixture(autouse=True)
def restore_root_logger() -> Iterator[None]:
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.mark.parametrize(
    ("name", "expected"),
    [("debug", logging.DEBUG), ("INFO", logging.INFO), ("warn", logging.WARNING), (40, 40)],
)
def test_parse_level(name: str | int, expected: int) -> None:
    assert parse_level(name) == expected


def test_parse_level_rejects_unknown_names() -> None:
    with pytest.raises(ValueError, match="verbose"):
        parse_level("verbose")


def test_json_formatter_includes_known_extras() -> None:
    record = logging.LogRecord("ldapmerge.app", logging.INFO, __file__, 1, "merged %d", (2,), None)
    record.domains = 2
    record.unrelated = "x"

    entry = json.loads(JSONFormatter().format(record))

    assert entry["message"] == "merged 2"
    assert entry["level"] == "INFO"
    assert entry["logger"] == "ldapmerge.app"
    assert entry["domains"] == 2
    assert "unrelated" not in entry


def test_log_dir_gets_json_lines(tmp_path: Path) -> None:
    configure_logging(level="debug", log_dir=tmp_path / "logs", force=True)

    logging.getLogger("ldapmerge.test").info("hello", extra={"command": "merge"})
    for handler in logging.getLogger().handlers:
        handler.flush()

    [line] = (tmp_path / "logs" / "ldapmerge.log").read_text().splitlines()
    entry = json.loads(line)
    assert entry["message"] == "hello"
    assert entry["command"] == "merge"
    assert all(
        not isinstance(handler, logging.StreamHandler)
        or isinstance(handler, logging.FileHandler)
        for handler in logging.getLogger().handlers
    )


def test_console_is_used_without_log_dir() -> None:
    configure_logging(level="warning", force=True)

    root = logging.getLogger()
    assert root.level == logging.WARNING
    assert any(type(handler) is logging.StreamHandler for handler in root.handlers)
