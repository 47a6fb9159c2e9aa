"""NSX Manager API client for LDAP identity sources."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING, Final
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ValidationError

from ldapmerge.adapters.http_resilience import ResilientClient
from ldapmerge.domain.ports.identity_sources import IdentitySourceError

from .schema import (
    FetchCertificateResult,
    LdapIdentitySource,
    LdapIdentitySourceList,
    NsxErrorPayload,
    ProbeResult,
    SearchResult,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from ldapmerge.config.http_resilience import ResilienceConfig
    from ldapmerge.config.nsx import NsxConfig

log = getLogger(__name__)

IDENTITY_SOURCES_PATH: Final[str] = "/policy/api/v1/aaa/ldap-identity-sources"


class NsxAPIError(IdentitySourceError):
    """Raised when NSX Manager answers with an error status or an unreadable body."""

    def __init__(
        self,
        http_status: int,
        error_message: str,
        *,
        error_code: int | None = None,
        module_name: str | None = None,
    ) -> None:
        self.http_status = http_status
        self.error_message = error_message
        self.error_code = error_code
        self.module_name = module_name
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.error_code is None:
            return f"NSX API error {self.http_status}: {self.error_message}"
        return f"NSX API error {self.http_status}: {self.error_message} (code: {self.error_code})"

    @classmethod
    def from_response(cls, response: httpx.Response) -> NsxAPIError:
        try:
            payload = NsxErrorPayload.model_validate_json(response.content)
        except ValidationError:
            payload = None
        if payload is not None and payload.error_message:
            return cls(
                response.status_code,
                payload.error_message,
                error_code=payload.error_code,
                module_name=payload.module_name,
            )
        return cls(response.status_code, response.text.strip() or response.reason_phrase)


class NsxTransportError(IdentitySourceError):
    """Raised when NSX Manager cannot be reached."""


class InvalidIdentitySourceError(IdentitySourceError):
    """Raised before sending an identity source NSX Manager could not accept."""


def identity_source_path(source_id: str) -> str:
    return f"{IDENTITY_SOURCES_PATH}/{quote(source_id, safe='')}"


class NsxClient:
    """Synchronous facade over the NSX identity source endpoints.

    Every public call runs its own event loop and HTTP session.
    """

    def __init__(
        self,
        *,
        config: NsxConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient

    @property
    def host(self) -> str:
        return self._config.base_url

    def list_identity_sources(self) -> list[LdapIdentitySource]:
        return asyncio.run(self._list_identity_sources_async())

    def get_identity_source(self, source_id: str) -> LdapIdentitySource:
        return asyncio.run(
            self._call(
                "GET",
                identity_source_path(source_id),
                model=LdapIdentitySource,
            )
        )

    def patch_identity_source(self, source: LdapIdentitySource) -> LdapIdentitySource:
        return asyncio.run(self._write_identity_source_async("PATCH", source))

    def put_identity_source(self, source: LdapIdentitySource) -> LdapIdentitySource:
        return asyncio.run(self._write_identity_source_async("PUT", source))

    def delete_identity_source(self, source_id: str) -> None:
        asyncio.run(self._delete_async(source_id))

    def probe_ldap_server(self, source: LdapIdentitySource) -> ProbeResult:
        return asyncio.run(
            self._call(
                "POST",
                IDENTITY_SOURCES_PATH,
                model=ProbeResult,
                params={"action": "probe_ldap_server"},
                body=source.to_request(),
            )
        )

    def probe_identity_source(self, source: LdapIdentitySource) -> ProbeResult:
        return asyncio.run(
            self._call(
                "POST",
                IDENTITY_SOURCES_PATH,
                model=ProbeResult,
                params={"action": "probe_identity_source"},
                body=source.to_request(),
            )
        )

    def probe_configured_source(self, source_id: str) -> ProbeResult:
        return asyncio.run(
            self._call(
                "POST",
                identity_source_path(source_id),
                model=ProbeResult,
                params={"action": "probe"},
            )
        )

    def fetch_certificate(self, ldap_server_url: str) -> FetchCertificateResult:
        return asyncio.run(
            self._call(
                "POST",
                IDENTITY_SOURCES_PATH,
                model=FetchCertificateResult,
                params={"action": "fetch_certificate"},
                body={"ldap_server_url": ldap_server_url},
            )
        )

    def fetch_certificates(
        self, ldap_server_urls: Sequence[str]
    ) -> list[tuple[str, FetchCertificateResult | NsxAPIError]]:
        """Fetch certificates for several URLs over one session.

        API errors are returned in place of the result so one unreachable
        server does not hide the others.
        """

        return asyncio.run(self._fetch_certificates_async(ldap_server_urls))

    def search(self, source_id: str, filter_value: str) -> SearchResult:
        return asyncio.run(
            self._call(
                "POST",
                f"{identity_source_path(source_id)}/search",
                model=SearchResult,
                body={"filter_value": filter_value},
            )
        )

    async def _list_identity_sources_async(self) -> list[LdapIdentitySource]:
        sources: list[LdapIdentitySource] = []
        seen_cursors: set[str] = set()
        cursor: str | None = None
        async with self._client_factory(self._resilience) as client:
            while True:
                page = await self._perform_request(
                    client,
                    "GET",
                    IDENTITY_SOURCES_PATH,
                    model=LdapIdentitySourceList,
                    params={"cursor": cursor} if cursor else None,
                )
                sources.extend(page.results)
                cursor = page.cursor
                if not cursor or cursor in seen_cursors:
                    break
                seen_cursors.add(cursor)
        log.debug("Listed %d identity sources from %s", len(sources), self.host)
        return sources

    async def _write_identity_source_async(
        self, method: str, source: LdapIdentitySource
    ) -> LdapIdentitySource:
        if not source.id:
            raise InvalidIdentitySourceError("Identity source id is required for updates")
        async with self._client_factory(self._resilience) as client:
            response = await self._send(
                client, method, identity_source_path(source.id), body=source.to_request()
            )
        if not response.content:
            return source
        return _parse(response, LdapIdentitySource)

    async def _fetch_certificates_async(
        self, ldap_server_urls: Sequence[str]
    ) -> list[tuple[str, FetchCertificateResult | NsxAPIError]]:
        results: list[tuple[str, FetchCertificateResult | NsxAPIError]] = []
        async with self._client_factory(self._resilience) as client:
            for url in ldap_server_urls:
                try:
                    result = await self._perform_request(
                        client,
                        "POST",
                        IDENTITY_SOURCES_PATH,
                        model=FetchCertificateResult,
                        params={"action": "fetch_certificate"},
                        body={"ldap_server_url": url},
                    )
                except NsxAPIError as exc:
                    log.warning("Certificate fetch for %s failed: %s", url, exc)
                    results.append((url, exc))
                    continue
                results.append((url, result))
        return results

    async def _delete_async(self, source_id: str) -> None:
        async with self._client_factory(self._resilience) as client:
            await self._send(client, "DELETE", identity_source_path(source_id))
        log.info("Deleted identity source %s on %s", source_id, self.host)

    async def _call[TModel: BaseModel](
        self,
        method: str,
        path: str,
        *,
        model: type[TModel],
        params: dict[str, str] | None = None,
        body: object = None,
    ) -> TModel:
        async with self._client_factory(self._resilience) as client:
            return await self._perform_request(
                client, method, path, model=model, params=params, body=body
            )

    async def _perform_request[TModel: BaseModel](
        self,
        client: ResilientClient,
        method: str,
        path: str,
        *,
        model: type[TModel],
        params: dict[str, str] | None = None,
        body: object = None,
    ) -> TModel:
        response = await self._send(client, method, path, params=params, body=body)
        return _parse(response, model)

    async def _send(
        self,
        client: ResilientClient,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        body: object = None,
    ) -> httpx.Response:
        log.debug("NSX %s %s params=%s", method, path, params)
        try:
            response = await client.request(method, path, params=params, json=body)
        except httpx.HTTPError as exc:
            raise NsxTransportError(f"Request to {self.host}{path} failed: {exc}") from exc
        if response.status_code >= httpx.codes.BAD_REQUEST:
            raise NsxAPIError.from_response(response)
        return response


def _parse[TModel: BaseModel](response: httpx.Response, model: type[TModel]) -> TModel:
    try:
        return model.model_validate_json(response.content)
    except ValidationError as exc:
        raise NsxAPIError(
            response.status_code, f"Failed to parse {model.__name__} response: {exc}"
        ) from exc
