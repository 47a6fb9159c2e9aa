"""NSX Manager connection configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Final

from .env import env_flag, env_float, env_value
from .errors import MissingConfigurationError
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy

NSX_TIMEOUT_SECONDS: Final[float] = 30.0
NSX_RATE_LIMIT = RateLimit(max_calls=100, per_seconds=1.0)


@dataclass(frozen=True, slots=True)
class NsxConfig:
    """Credentials and transport settings for one NSX Manager."""

    host: str
    username: str
    password: str = field(repr=False)
    insecure: bool = False
    timeout_seconds: float = NSX_TIMEOUT_SECONDS
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    cache_ttl_seconds: float | None = None

    @property
    def base_url(self) -> str:
        return self.host.rstrip("/")

    @property
    def resilience(self) -> ResilienceConfig:
        return ResilienceConfig(
            name="nsx",
            base_url=self.base_url,
            timeout_seconds=self.timeout_seconds,
            retry=self.retry,
            ratelimit=NSX_RATE_LIMIT,
            cache=(
                CacheConfig(ttl_seconds=self.cache_ttl_seconds)
                if self.cache_ttl_seconds
                else None
            ),
            default_headers={
                "Accept": "application/json",
                "Content-Type": "application/json",
            },
            basic_auth=(self.username, self.password),
            verify_tls=not self.insecure,
        )


def get_nsx_config(
    *,
    host: str | None = None,
    username: str | None = None,
    password: str | None = None,
    insecure: bool | None = None,
    timeout_seconds: float | None = None,
) -> NsxConfig:
    """Build an :class:`NsxConfig` from explicit values, falling back to ``LDAPMERGE_NSX_*``."""

    resolved = {
        "host": host or env_value("NSX_HOST"),
        "username": username or env_value("NSX_USERNAME"),
        "password": password or env_value("NSX_PASSWORD"),
    }
    missing = sorted(name for name, value in resolved.items() if not value)
    if missing:
        flags = ", ".join(f"--{name}" for name in missing)
        raise MissingConfigurationError(f"Missing NSX connection settings: {flags}")

    return NsxConfig(
        host=str(resolved["host"]),
        username=str(resolved["username"]),
        password=str(resolved["password"]),
        insecure=insecure if insecure is not None else env_flag("NSX_INSECURE"),
        timeout_seconds=(
            timeout_seconds
            if timeout_seconds is not None
            else env_float("NSX_TIMEOUT", default=NSX_TIMEOUT_SECONDS)
        ),
        cache_ttl_seconds=env_float("NSX_CACHE_TTL", default=0.0) or None,
    )
