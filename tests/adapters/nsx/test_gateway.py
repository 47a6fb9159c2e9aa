from __future__ import annotations

from typing import TYPE_CHECKING

from ldapmerge.adapters.nsx import (
    FetchCertificateResult,
    LdapIdentitySource,
    NsxAPIError,
    NsxIdentitySourceGateway,
)
from ldapmerge.domain.model import Domain, LdapServer

if TYPE_CHECKING:
    from collections.abc import Sequence


class FakeNsxClient:
    def __init__(self, sources: list[LdapIdentitySource]) -> None:
        self.sources = sources
        self.put: list[LdapIdentitySource] = []

    def list_identity_sources(self) -> list[LdapIdentitySource]:
        return self.sources

    def put_identity_source(self, source: LdapIdentitySource) -> LdapIdentitySource:
        self.put.append(source)
        return source

    def fetch_certificate(self, url: str) -> FetchCertificateResult:
        return FetchCertificateResult(pem_encoded=f"PEM:{url}")

    def fetch_certificates(
        self, urls: Sequence[str]
    ) -> list[tuple[str, FetchCertificateResult | NsxAPIError]]:
        return [
            (url, NsxAPIError(400, "down") if "down" in url else self.fetch_certificate(url))
            for url in urls
        ]


def test_list_domains_translates_sources(identity_source_payload: dict[str, object]) -> None:
    client = FakeNsxClient([LdapIdentitySource.model_validate(identity_source_payload)])

    [domain] = NsxIdentitySourceGateway(client).list_domains()  # type: ignore[arg-type]

    assert domain.id == "example.lab"
    assert domain.ldap_servers[0].enabled == "true"


def test_replace_domain_puts_identity_source() -> None:
    client = FakeNsxClient([])
    domain = Domain(id="d1", ldap_servers=(LdapServer(url="ldaps://a:636", enabled="true"),))

    NsxIdentitySourceGateway(client).replace_domain(domain)  # type: ignore[arg-type]

    [source] = client.put
    assert source.id == "d1"
    assert source.ldap_servers[0].enabled is True


def test_failed_fetches_become_empty_items() -> None:
    gateway = NsxIdentitySourceGateway(FakeNsxClient([]))  # type: ignore[arg-type]

    items = gateway.fetch_certificates(["ldaps://down:636", "ldaps://up:636"])

    assert [(item.match_url, item.pem_encoded) for item in items] == [
        ("ldaps://down:636", ""),
        ("ldaps://up:636", "PEM:ldaps://up:636"),
    ]
