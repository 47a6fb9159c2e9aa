"""Identity source gateway backed by the NSX Manager API."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from .client import NsxAPIError, NsxClient
from .schema import FetchCertificateResult
from .translator import (
    certificate_item_from_fetch,
    domain_to_identity_source,
    identity_sources_to_domains,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from ldapmerge.adapters.http_resilience import ResilientClient
    from ldapmerge.config.http_resilience import ResilienceConfig
    from ldapmerge.config.nsx import NsxConfig
    from ldapmerge.domain.model import CertificateMatchItem, Domain

log = getLogger(__name__)


class NsxIdentitySourceGateway:
    """Expose NSX identity sources as :class:`Domain` values."""

    def __init__(self, client: NsxClient) -> None:
        self.client = client

    def list_domains(self) -> list[Domain]:
        return identity_sources_to_domains(self.client.list_identity_sources())

    def replace_domain(self, domain: Domain) -> None:
        self.client.put_identity_source(domain_to_identity_source(domain))

    def fetch_certificate(self, url: str) -> CertificateMatchItem:
        return certificate_item_from_fetch(url, self.client.fetch_certificate(url))

    def fetch_certificates(self, urls: Sequence[str]) -> list[CertificateMatchItem]:
        """Failed fetches come back as items without a certificate."""

        items: list[CertificateMatchItem] = []
        for url, outcome in self.client.fetch_certificates(urls):
            if isinstance(outcome, NsxAPIError):
                items.append(certificate_item_from_fetch(url, FetchCertificateResult()))
                continue
            items.append(certificate_item_from_fetch(url, outcome))
        return items


def build_nsx_gateway(
    config: NsxConfig,
    *,
    client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
) -> NsxIdentitySourceGateway:
    return NsxIdentitySourceGateway(NsxClient(config=config, client_factory=client_factory))
