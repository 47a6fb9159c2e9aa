"""Pydantic models for the JSON documents the tool reads and writes.

Three shapes exist: a list of domains (input and merge result), the Ansible
certificate-fetch loop output, and the HTTP merge request that wraps both.
Flag fields stay strings exactly as received.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class PayloadModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class LdapServerPayload(PayloadModel):
    url: str
    starttls: str | None = None
    enabled: str | None = None
    bind_username: str | None = None
    bind_password: str | None = Field(default=None, repr=False)
    certificates: list[str] | None = None


class DomainPayload(PayloadModel):
    id: str
    domain_name: str = ""
    base_dn: str = ""
    alternative_domain_names: list[str] | None = None
    ldap_servers: list[LdapServerPayload] | None = None


class CertificateDetailPayload(PayloadModel):
    model_config = ConfigDict(extra="allow")

    subject_cn: str | None = None


class CertificateJsonPayload(PayloadModel):
    pem_encoded: str = ""
    details: list[CertificateDetailPayload] | None = None


class ResponseItemPayload(PayloadModel):
    url: str = ""
    starttls: str | None = None
    enabled: str | None = None


class CertificateResultPayload(PayloadModel):
    certificate: CertificateJsonPayload = Field(
        default_factory=CertificateJsonPayload, alias="json"
    )
    item: ResponseItemPayload = Field(default_factory=ResponseItemPayload)
    ansible_loop_var: str | None = None


class CertificateResponsePayload(PayloadModel):
    results: list[CertificateResultPayload] = Field(
        default_factory=list["CertificateResultPayload"]
    )

    def to_document(self) -> dict[str, object]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class MergeRequestPayload(PayloadModel):
    initial: list[DomainPayload] = Field(default_factory=list["DomainPayload"])
    response: CertificateResponsePayload = Field(default_factory=CertificateResponsePayload)
