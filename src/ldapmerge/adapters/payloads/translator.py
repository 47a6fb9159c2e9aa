"""Convert payload models and JSON documents to domain values and back."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ldapmerge.domain.model import CertificateDetail, CertificateMatchItem, Domain, LdapServer

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .schema import (
        CertificateDetailPayload,
        CertificateResponsePayload,
        DomainPayload,
        LdapServerPayload,
    )

type DomainDocument = dict[str, object]


def domain_from_payload(payload: DomainPayload) -> Domain:
    return Domain(
        id=payload.id,
        domain_name=payload.domain_name,
        base_dn=payload.base_dn,
        alternative_domain_names=tuple(payload.alternative_domain_names or ()),
        ldap_servers=tuple(_server_from_payload(server) for server in payload.ldap_servers or ()),
    )


def _server_from_payload(payload: LdapServerPayload) -> LdapServer:
    return LdapServer(
        url=payload.url,
        starttls=payload.starttls,
        enabled=payload.enabled,
        bind_username=payload.bind_username,
        bind_password=payload.bind_password,
        certificates=tuple(payload.certificates or ()),
    )


def domains_from_payload(payloads: Iterable[DomainPayload]) -> list[Domain]:
    return [domain_from_payload(payload) for payload in payloads]


def domain_to_document(domain: Domain) -> DomainDocument:
    """Render a domain with the field names and omissions of the on-disk format.

    Unset flags, empty credentials and an empty certificate list are left out.
    """

    return {
        "id": domain.id,
        "domain_name": domain.domain_name,
        "base_dn": domain.base_dn,
        "alternative_domain_names": list(domain.alternative_domain_names),
        "ldap_servers": [_server_to_document(server) for server in domain.ldap_servers],
    }


def _server_to_document(server: LdapServer) -> dict[str, object]:
    document: dict[str, object] = {"url": server.url}
    if server.starttls is not None:
        document["starttls"] = server.starttls
    if server.enabled is not None:
        document["enabled"] = server.enabled
    if server.bind_username:
        document["bind_username"] = server.bind_username
    if server.bind_password:
        document["bind_password"] = server.bind_password
    if server.certificates:
        document["certificates"] = list(server.certificates)
    return document


def domains_to_document(domains: Iterable[Domain]) -> list[DomainDocument]:
    return [domain_to_document(domain) for domain in domains]


def certificate_items_from_response(
    response: CertificateResponsePayload,
) -> list[CertificateMatchItem]:
    """Flatten the Ansible loop results; ``item.url`` is the match key."""

    return [
        CertificateMatchItem(
            match_url=result.item.url,
            pem_encoded=result.certificate.pem_encoded,
            details=tuple(_detail_from_payload(d) for d in result.certificate.details or ()),
        )
        for result in response.results
    ]


def _detail_from_payload(payload: CertificateDetailPayload) -> CertificateDetail:
    extra = payload.model_extra or {}
    return CertificateDetail(
        subject_cn=payload.subject_cn,
        subject_dn=_optional_str(extra.get("subject_dn")),
        issuer_cn=_optional_str(extra.get("issuer_cn")),
        issuer_dn=_optional_str(extra.get("issuer_dn")),
        not_before=_optional_str(extra.get("not_before")),
        not_after=_optional_str(extra.get("not_after")),
        serial_number=_optional_str(extra.get("serial_number")),
        signature_algorithm=_optional_str(extra.get("signature_algorithm")),
    )


def _optional_str(value: object) -> str | None:
    return None if value is None else str(value)

