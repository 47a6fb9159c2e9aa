"""Async HTTP session with retries, a client-side rate limit and an optional cache."""

from __future__ import annotations

import time
from logging import getLogger
from typing import TYPE_CHECKING, TypedDict

import httpx
from aiolimiter import AsyncLimiter
from hishel import AsyncSqliteStorage, FilterPolicy
from hishel import Request as HishelCacheRequest
from hishel import Response as HishelCacheResponse
from hishel._policies import BaseFilter
from hishel.httpx import AsyncCacheClient
from httpx_retries import RetryTransport

if TYPE_CHECKING:
    from types import TracebackType

    from ldapmerge.config.http_resilience import CacheConfig, ResilienceConfig

log = getLogger(__name__)


class _ClientOptions(TypedDict, total=False):
    base_url: str
    timeout: float
    headers: dict[str, str]
    auth: httpx.BasicAuth
    transport: httpx.AsyncBaseTransport


class ResilientClient:
    """One HTTP session towards a single service.

    ``transport`` replaces the network layer underneath the retry transport;
    tests pass an ``httpx.MockTransport`` here.
    """

    def __init__(
        self,
        config: ResilienceConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self._limiter = (
            AsyncLimiter(config.ratelimit.max_calls, config.ratelimit.per_seconds)
            if config.ratelimit
            else None
        )
        if not config.verify_tls:
            log.warning("TLS certificate verification is disabled for %s", config.name)

        network = transport or httpx.AsyncHTTPTransport(verify=config.verify_tls)
        options: _ClientOptions = {
            "timeout": config.timeout_seconds,
            "transport": RetryTransport(transport=network, retry=config.retry.build()),
        }
        if config.base_url is not None:
            options["base_url"] = config.base_url
        if config.default_headers:
            options["headers"] = dict(config.default_headers)
        if config.basic_auth is not None:
            options["auth"] = httpx.BasicAuth(*config.basic_auth)

        if config.cache is None:
            self._client = httpx.AsyncClient(**options)
        else:
            storage, policy = _cache_components(config.cache)
            self._client = AsyncCacheClient(**options, storage=storage, policy=policy)

    async def __aenter__(self) -> ResilientClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, str] | None = None,
        json: object = None,
    ) -> httpx.Response:
        """Send one request, waiting for the rate limiter first when one is set."""

        started = time.perf_counter()
        if self._limiter is None:
            response = await self._client.request(method, url, params=params, json=json)
        else:
            async with self._limiter:
                response = await self._client.request(method, url, params=params, json=json)
        log.debug(
            "%s %s %s -> %d",
            self.config.name,
            method,
            url,
            response.status_code,
            extra={"duration_ms": int((time.perf_counter() - started) * 1000)},
        )
        return response


class _OnlyGetRequests(BaseFilter[HishelCacheRequest]):
    def needs_body(self) -> bool:
        return False

    def apply(self, item: HishelCacheRequest, body: bytes | None) -> bool:  # noqa: ARG002
        return item.method.upper() == "GET"


class _OnlySuccessfulResponses(BaseFilter[HishelCacheResponse]):
    def needs_body(self) -> bool:
        return False

    def apply(self, item: HishelCacheResponse, body: bytes | None) -> bool:  # noqa: ARG002
        return item.status_code == httpx.codes.OK


def _cache_components(config: CacheConfig) -> tuple[AsyncSqliteStorage, FilterPolicy]:
    storage = AsyncSqliteStorage(
        database_path=":memory:",
        default_ttl=config.ttl_seconds,
        refresh_ttl_on_access=config.refresh_ttl_on_access,
    )
    policy = FilterPolicy(
        request_filters=[_OnlyGetRequests()],
        response_filters=[_OnlySuccessfulResponses()],
    )
    return storage, policy
