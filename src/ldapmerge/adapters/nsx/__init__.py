"""Public interface for the NSX Manager adapter."""

from __future__ import annotations

from .client import (
    IDENTITY_SOURCES_PATH,
    InvalidIdentitySourceError,
    NsxAPIError,
    NsxClient,
    NsxTransportError,
)
from .gateway import NsxIdentitySourceGateway, build_nsx_gateway
from .schema import (
    FetchCertificateResult,
    LdapIdentitySource,
    LdapIdentitySourceList,
    NsxLdapServer,
    ProbeResult,
    SearchResult,
)
from .translator import (
    certificate_item_from_fetch,
    domain_to_identity_source,
    identity_source_to_domain,
    identity_sources_to_domains,
    parse_flag,
)

__all__ = [
    "IDENTITY_SOURCES_PATH",
    "InvalidIdentitySourceError",
    "FetchCertificateResult",
    "LdapIdentitySource",
    "LdapIdentitySourceList",
    "NsxAPIError",
    "NsxClient",
    "NsxIdentitySourceGateway",
    "NsxLdapServer",
    "NsxTransportError",
    "ProbeResult",
    "SearchResult",
    "build_nsx_gateway",
    "certificate_item_from_fetch",
    "domain_to_identity_source",
    "identity_source_to_domain",
    "identity_sources_to_domains",
    "parse_flag",
]
