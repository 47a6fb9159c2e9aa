from __future__ import annotations

import json
import os
from typing import TYPE_CHECKING

import pytest

from ldapmerge.adapters.sqlalchemy import create_database_engine, shutdown, startup
from ldapmerge.domain.model import Domain, LdapServer

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator
    from pathlib import Path

    from ldapmerge.adapters.sqlalchemy import Database
    from ldapmerge.domain.ports.unit_of_work import StoreUnitOfWork

MEMORY_URI = "sqlite+pysqlite:///:memory:"


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for name in list(os.environ):
        if name.startswith("LDAPMERGE_"):
            monkeypatch.delenv(name)
    monkeypatch.setenv("LDAPMERGE_DATA_DIR", str(tmp_path / "data"))


@pytest.fixture
def database() -> Iterator[Database]:
    db = startup(engine=create_database_engine(MEMORY_URI))
    try:
        yield db
    finally:
        shutdown(db)


@pytest.fixture
def unit_of_work_factory(database: Database) -> Callable[[], StoreUnitOfWork]:
    return database.unit_of_work


@pytest.fixture
def sample_domains() -> list[Domain]:
    return [
        Domain(
            id="example.lab",
            domain_name="example.lab",
            base_dn="DC=example,DC=lab",
            alternative_domain_names=("example",),
            ldap_servers=(
                LdapServer(
                    url="ldaps://a.example.lab:636",
                    starttls="false",
                    enabled="true",
                    bind_username="svc@example.lab",
                    bind_password="secret",
                ),
                LdapServer(url="ldaps://b.example.lab:636", starttls="false", enabled="true"),
            ),
        ),
        Domain(
            id="corp.local",
            domain_name="corp.local",
            base_dn="DC=corp,DC=local",
            ldap_servers=(LdapServer(url="ldap://dc1.corp.local:389", starttls="true"),),
        ),
    ]


def certificate_result(url: str, pem: str, **details: str) -> dict[str, object]:
    return {
        "json": {"pem_encoded": pem, "details": [details] if details else []},
        "item": {"url": url, "starttls": "false", "enabled": "true"},
        "ansible_loop_var": "item",
    }


@pytest.fixture
def response_document() -> dict[str, object]:
    return {
        "results": [
            certificate_result("ldaps://a.example.lab:636", "CERT-A1", subject_cn="a.example.lab"),
            certificate_result("ldaps://a.example.lab:636", "CERT-A2"),
            certificate_result("ldap://dc1.corp.local:389", ""),
        ]
    }


@pytest.fixture
def initial_file(tmp_path: Path, sample_domains: list[Domain]) -> Path:
    from ldapmerge.adapters.payloads import dump_domains  # noqa: PLC0415

    path = tmp_path / "initial.json"
    path.write_text(dump_domains(sample_domains))
    return path


@pytest.fixture
def response_file(tmp_path: Path, response_document: dict[str, object]) -> Path:
    path = tmp_path / "response.json"
    path.write_text(json.dumps(response_document))
    return path
