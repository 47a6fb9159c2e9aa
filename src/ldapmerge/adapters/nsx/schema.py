"""Pydantic models for the NSX Manager LDAP identity source API."""

from __future__ import annotations

from typing import Final

from pydantic import BaseModel, ConfigDict, Field

LDAP_IDENTITY_SOURCE_RESOURCE_TYPE: Final[str] = "LdapIdentitySource"


class NsxBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class NsxLdapServer(NsxBaseModel):
    url: str
    use_starttls: bool = False
    enabled: bool = False
    bind_identity: str | None = None
    password: str | None = Field(default=None, repr=False)
    certificates: list[str] = Field(default_factory=list)


class LdapIdentitySource(NsxBaseModel):
    id: str | None = None
    display_name: str | None = None
    description: str | None = None
    resource_type: str | None = LDAP_IDENTITY_SOURCE_RESOURCE_TYPE
    domain_name: str = ""
    base_dn: str = ""
    alternative_domain_names: list[str] = Field(default_factory=list)
    ldap_servers: list[NsxLdapServer] = Field(default_factory=list["NsxLdapServer"])
    path: str | None = None
    realization_id: str | None = None
    relative_path: str | None = None

    def to_request(self) -> dict[str, object]:
        return self.model_dump(mode="json", exclude_none=True)


class LdapIdentitySourceList(NsxBaseModel):
    results: list[LdapIdentitySource] = Field(default_factory=list["LdapIdentitySource"])
    result_count: int = 0
    cursor: str | None = None


class ProbeResultItem(NsxBaseModel):
    ldap_server_url: str = ""
    success: bool = False
    error_message: str | None = None


class ProbeResult(NsxBaseModel):
    results: list[ProbeResultItem] = Field(default_factory=list["ProbeResultItem"])


class CertificateDetailPayload(NsxBaseModel):
    subject_cn: str | None = None
    subject_dn: str | None = None
    issuer_cn: str | None = None
    issuer_dn: str | None = None
    not_before: str | None = None
    not_after: str | None = None
    serial_number: str | None = None
    signature_algorithm: str | None = None


class FetchCertificateResult(NsxBaseModel):
    pem_encoded: str = ""
    details: list[CertificateDetailPayload] = Field(
        default_factory=list["CertificateDetailPayload"]
    )


class SearchResultItem(NsxBaseModel):
    dn: str = ""
    name: str = ""
    type: str = ""
    display_name: str | None = None
    email: str | None = None


class SearchResult(NsxBaseModel):
    results: list[SearchResultItem] = Field(default_factory=list["SearchResultItem"])
    result_count: int = 0


class NsxErrorPayload(NsxBaseModel):
    http_status: int | None = None
    error_code: int | None = None
    module_name: str | None = None
    error_message: str = ""
