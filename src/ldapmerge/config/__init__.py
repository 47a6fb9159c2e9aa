"""Application configuration helpers."""

from __future__ import annotations

from .env import env_flag, env_value
from .errors import ConfigurationError, InvalidConfigurationError, MissingConfigurationError
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .logging import JSONFormatter, configure_logging, parse_level
from .nsx import NsxConfig, get_nsx_config
from .server import ServerConfig, get_server_config
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config

__all__ = [
    "CacheConfig",
    "ConfigurationError",
    "DatabaseConfig",
    "InvalidConfigurationError",
    "JSONFormatter",
    "MissingConfigurationError",
    "NsxConfig",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "ServerConfig",
    "StorageConfig",
    "configure_logging",
    "env_flag",
    "env_value",
    "get_database_config",
    "get_nsx_config",
    "get_server_config",
    "get_storage_config",
    "parse_level",
]
