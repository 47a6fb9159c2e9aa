"""JSON payload formats for domain lists, certificate responses and merge requests."""

from __future__ import annotations

from .codec import (
    InvalidPayloadError,
    PayloadFileError,
    dump_domains,
    load_certificate_response_file,
    load_domains_file,
    parse_certificate_response,
    parse_domains,
    write_domains_file,
)
from .schema import (
    CertificateResponsePayload,
    DomainPayload,
    LdapServerPayload,
    MergeRequestPayload,
)
from .translator import (
    certificate_items_from_response,
    domain_from_payload,
    domains_from_payload,
    domains_to_document,
)

__all__ = [
    "CertificateResponsePayload",
    "DomainPayload",
    "InvalidPayloadError",
    "LdapServerPayload",
    "MergeRequestPayload",
    "PayloadFileError",
    "certificate_items_from_response",
    "domain_from_payload",
    "domains_from_payload",
    "domains_to_document",
    "dump_domains",
    "load_certificate_response_file",
    "load_domains_file",
    "parse_certificate_response",
    "parse_domains",
    "write_domains_file",
]
