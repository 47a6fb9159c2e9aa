"""Translate between NSX identity sources and :mod:`ldapmerge.domain.model` values."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from ldapmerge.domain.model import (
    CertificateDetail,
    CertificateMatchItem,
    Domain,
    LdapServer,
)

from .schema import LDAP_IDENTITY_SOURCE_RESOURCE_TYPE, LdapIdentitySource, NsxLdapServer

if TYPE_CHECKING:
    from collections.abc import Iterable

    from ldapmerge.domain.model import Flag

    from .schema import FetchCertificateResult

# Anything else, including an unset flag, reads as false.
_TRUE_SPELLINGS: Final[frozenset[str]] = frozenset({"1", "t", "T", "TRUE", "true", "True"})


def parse_flag(value: Flag) -> bool:
    return value in _TRUE_SPELLINGS


def format_flag(value: bool) -> str:  # noqa: FBT001
    return "true" if value else "false"


def domain_to_identity_source(domain: Domain) -> LdapIdentitySource:
    return LdapIdentitySource(
        id=domain.id,
        display_name=domain.domain_name,
        resource_type=LDAP_IDENTITY_SOURCE_RESOURCE_TYPE,
        domain_name=domain.domain_name,
        base_dn=domain.base_dn,
        alternative_domain_names=list(domain.alternative_domain_names),
        ldap_servers=[_server_to_nsx(server) for server in domain.ldap_servers],
    )


def _server_to_nsx(server: LdapServer) -> NsxLdapServer:
    return NsxLdapServer(
        url=server.url,
        use_starttls=parse_flag(server.starttls),
        enabled=parse_flag(server.enabled),
        bind_identity=server.bind_username or None,
        password=server.bind_password or None,
        certificates=list(server.certificates),
    )


def identity_source_to_domain(source: LdapIdentitySource) -> Domain:
    return Domain(
        id=source.id or "",
        domain_name=source.domain_name,
        base_dn=source.base_dn,
        alternative_domain_names=tuple(source.alternative_domain_names),
        ldap_servers=tuple(_server_from_nsx(server) for server in source.ldap_servers),
    )


def _server_from_nsx(server: NsxLdapServer) -> LdapServer:
    return LdapServer(
        url=server.url,
        starttls=format_flag(server.use_starttls),
        enabled=format_flag(server.enabled),
        bind_username=server.bind_identity,
        bind_password=server.password,
        certificates=tuple(server.certificates),
    )


def identity_sources_to_domains(sources: Iterable[LdapIdentitySource]) -> list[Domain]:
    return [identity_source_to_domain(source) for source in sources]


def certificate_item_from_fetch(url: str, result: FetchCertificateResult) -> CertificateMatchItem:
    return CertificateMatchItem(
        match_url=url,
        pem_encoded=result.pem_encoded,
        details=tuple(
            CertificateDetail(**detail.model_dump(exclude_none=True)) for detail in result.details
        ),
    )
