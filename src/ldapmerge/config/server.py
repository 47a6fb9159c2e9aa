"""HTTP server configuration values."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from .env import env_int, env_value

DEFAULT_SERVER_HOST: Final[str] = "0.0.0.0"  # noqa: S104
DEFAULT_SERVER_PORT: Final[int] = 8080


@dataclass(frozen=True, slots=True)
class ServerConfig:
    host: str = DEFAULT_SERVER_HOST
    port: int = DEFAULT_SERVER_PORT


def get_server_config(*, host: str | None = None, port: int | None = None) -> ServerConfig:
    return ServerConfig(
        host=host or env_value("SERVER_HOST") or DEFAULT_SERVER_HOST,
        port=port if port is not None else env_int("SERVER_PORT", default=DEFAULT_SERVER_PORT),
    )
