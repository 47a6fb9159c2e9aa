"""Certificate reconciliation for LDAP identity sources.

The merge is a pure function: a list of :class:`Domain` values and a set of
certificate fetch results go in, a new list of domains comes out. Servers are
matched to certificates by exact ``url`` equality, with no normalisation of
case, trailing slashes or default ports.

Every server's ``certificates`` is *replaced* by whatever the fetch results
hold for its URL. A server without a match ends up with no certificates, even
if the input carried some.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import replace
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from ldapmerge.domain.model import (
        CertificateIndex,
        CertificateMatchItem,
        Domain,
        LdapServer,
        Pem,
    )


def build_certificate_index(items: Iterable[CertificateMatchItem]) -> dict[str, list[Pem]]:
    """Group non-empty PEM payloads by the URL they were fetched for.

    Items with an empty URL or an empty payload are skipped, so a URL only
    appears as a key once it has at least one certificate. Per-URL order
    follows input order.
    """

    index: dict[str, list[Pem]] = {}
    for item in items:
        if not item.match_url or not item.pem_encoded:
            continue
        index.setdefault(item.match_url, []).append(item.pem_encoded)
    return index


def merge_domains(
    domains: Sequence[Domain],
    certificates: CertificateIndex | Iterable[CertificateMatchItem],
) -> list[Domain]:
    """Attach certificates to every LDAP server of ``domains``.

    ``certificates`` is either a prebuilt index (``url -> [pem, ...]``) or the
    raw fetch results, which are indexed first. Domain and server order are
    kept. The inputs are never modified.
    """

    index: CertificateIndex = (
        certificates
        if isinstance(certificates, Mapping)
        else build_certificate_index(certificates)
    )
    return [_merge_domain(domain, index) for domain in domains]


def _merge_domain(domain: Domain, index: CertificateIndex) -> Domain:
    servers = tuple(_merge_server(server, index) for server in domain.ldap_servers)
    return replace(domain, ldap_servers=servers)


def _merge_server(server: LdapServer, index: CertificateIndex) -> LdapServer:
    matched = index.get(server.url)
    return server.with_certificates(matched or ())


def count_certificates(domains: Iterable[Domain]) -> int:
    return sum(len(server.certificates) for domain in domains for server in domain.ldap_servers)
