from __future__ import annotations

import pytest

from ldapmerge.domain.model import Domain
from ldapmerge.domain.ports.identity_sources import IdentitySourceError
from ldapmerge.domain.push import PushOutcome, push_domains


def test_push_continues_after_a_failed_domain() -> None:
    domains = [Domain(id="one"), Domain(id="two"), Domain(id="three")]
    written: list[str] = []

    def write(domain: Domain) -> None:
        if domain.id == "two":
            raise IdentitySourceError("boom")
        written.append(domain.id)

    report = push_domains(domains, write)

    assert written == ["one", "three"]
    assert report.succeeded == 2
    assert report.failed == 1
    assert report.failed_ids == ("two",)
    assert not report.ok
    assert report.outcomes[1] == PushOutcome(domain_id="two", error="boom")


def test_push_reports_each_outcome_as_it_happens() -> None:
    seen: list[PushOutcome] = []

    report = push_domains([Domain(id="one")], lambda _domain: None, on_outcome=seen.append)

    assert seen == [PushOutcome(domain_id="one")]
    assert report.ok


def test_unexpected_errors_propagate() -> None:
    def write(_domain: Domain) -> None:
        raise KeyError("bug")

    with pytest.raises(KeyError):
        push_domains([Domain(id="one")], write)
