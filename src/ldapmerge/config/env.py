"""Environment variable loaders for configuration."""

from __future__ import annotations

import os
from typing import Final

from .errors import InvalidConfigurationError

ENV_PREFIX: Final[str] = "LDAPMERGE_"

_TRUTHY: Final[frozenset[str]] = frozenset({"1", "true", "yes", "on"})
_FALSY: Final[frozenset[str]] = frozenset({"0", "false", "no", "off"})


def env_name(key: str) -> str:
    """Return the prefixed variable name, e.g. ``NSX_HOST`` -> ``LDAPMERGE_NSX_HOST``."""

    return f"{ENV_PREFIX}{key.upper()}"


def env_value(key: str) -> str | None:
    value = os.getenv(env_name(key))
    if value is None or not value.strip():
        return None
    return value.strip()


def env_flag(key: str, *, default: bool = False) -> bool:
    value = env_value(key)
    if value is None:
        return default
    lowered = value.lower()
    if lowered in _TRUTHY:
        return True
    if lowered in _FALSY:
        return False
    raise InvalidConfigurationError(f"{env_name(key)} is not a boolean: {value!r}")


def env_float(key: str, *, default: float) -> float:
    value = env_value(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError as exc:
        raise InvalidConfigurationError(f"{env_name(key)} is not a number: {value!r}") from exc


def env_int(key: str, *, default: int) -> int:
    value = env_value(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError as exc:
        raise InvalidConfigurationError(f"{env_name(key)} is not an integer: {value!r}") from exc

