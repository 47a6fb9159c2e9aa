"""Port for the remote system holding LDAP identity sources."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from ldapmerge.domain.model import CertificateMatchItem, Domain


class IdentitySourceError(RuntimeError):
    """Raised by gateways when the remote system rejects or fails a call."""


@runtime_checkable
class IdentitySourceGateway(Protocol):
    """Read and write identity sources expressed as :class:`Domain` values."""

    def list_domains(self) -> list[Domain]: ...

    def replace_domain(self, domain: Domain) -> None: ...

    def fetch_certificate(self, url: str) -> CertificateMatchItem: ...

    def fetch_certificates(self, urls: Sequence[str]) -> list[CertificateMatchItem]: ...
