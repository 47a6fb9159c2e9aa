"""Shared fixtures for NSX adapter tests."""

from __future__ import annotations

import pytest

from ldapmerge.config.http_resilience import RetryPolicy
from ldapmerge.config.nsx import NsxConfig


@pytest.fixture
def nsx_config() -> NsxConfig:
    return NsxConfig(
        host="https://nsx.example.com/",
        username="admin",
        password="VMware1!",
        retry=RetryPolicy(total=2, backoff_factor=0.0, backoff_jitter=0.0),
    )


@pytest.fixture
def identity_source_payload() -> dict[str, object]:
    return {
        "id": "example.lab",
        "display_name": "example.lab",
        "resource_type": "LdapIdentitySource",
        "domain_name": "example.lab",
        "base_dn": "DC=example,DC=lab",
        "alternative_domain_names": ["example"],
        "ldap_servers": [
            {
                "url": "ldaps://a.example.lab:636",
                "use_starttls": False,
                "enabled": True,
                "bind_identity": "svc@example.lab",
                "certificates": ["OLD"],
            }
        ],
        "_revision": 3,
    }

