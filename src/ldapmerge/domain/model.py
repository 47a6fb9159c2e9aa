"""Value objects for LDAP identity sources and fetched certificate material.

All entities are immutable. Sequences are tuples so a merged result can be
handed around without any caller being able to reach back into another
caller's data.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence
    from datetime import datetime

type Flag = str | None
"""Tri-state flag as received on the wire ("true", "false", or unset). Never coerced."""

type Pem = str
type CertificateIndex = Mapping[str, Sequence[Pem]]
type JsonDocument = object


@dataclass(frozen=True, slots=True, kw_only=True)
class LdapServer:
    url: str
    starttls: Flag = None
    enabled: Flag = None
    bind_username: str | None = None
    bind_password: str | None = field(default=None, repr=False)
    certificates: tuple[Pem, ...] = ()

    def with_certificates(self, certificates: Sequence[Pem]) -> LdapServer:
        return replace(self, certificates=tuple(certificates))


@dataclass(frozen=True, slots=True, kw_only=True)
class Domain:
    id: str
    domain_name: str = ""
    base_dn: str = ""
    alternative_domain_names: tuple[str, ...] = ()
    ldap_servers: tuple[LdapServer, ...] = ()


@dataclass(frozen=True, slots=True, kw_only=True)
class CertificateDetail:
    subject_cn: str | None = None
    subject_dn: str | None = None
    issuer_cn: str | None = None
    issuer_dn: str | None = None
    not_before: str | None = None
    not_after: str | None = None
    serial_number: str | None = None
    signature_algorithm: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class CertificateMatchItem:
    """One certificate fetch result for the LDAP server at ``match_url``.

    An empty ``pem_encoded`` means the fetch produced nothing.
    """

    match_url: str
    pem_encoded: Pem = ""
    details: tuple[CertificateDetail, ...] = ()


type CertificateResponse = Sequence[CertificateMatchItem]


@dataclass(frozen=True, slots=True, kw_only=True)
class HistoryEntry:
    """Audit record of one merge: both inputs and the result, as JSON documents."""

    initial: JsonDocument
    response: JsonDocument
    result: JsonDocument
    id: int | None = None
    created_at: datetime | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class ConnectionProfile:
    """A saved NSX Manager connection."""

    name: str
    host: str
    username: str
    password: str = field(default="", repr=False)
    description: str = ""
    insecure: bool = False
    id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def redacted(self) -> ConnectionProfile:
        return replace(self, password="")
