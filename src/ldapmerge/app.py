"""Application orchestration entry points."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from ldapmerge.adapters.payloads import (
    certificate_items_from_response,
    domains_to_document,
    load_certificate_response_file,
    load_domains_file,
    write_domains_file,
)
from ldapmerge.adapters.sqlalchemy import startup
from ldapmerge.config.storage import get_database_config
from ldapmerge.domain.merge import count_certificates, merge_domains
from ldapmerge.domain.model import ConnectionProfile, HistoryEntry
from ldapmerge.domain.push import push_domains as push_each

if TYPE_CHECKING:
    from pathlib import Path

    from ldapmerge.adapters.payloads import CertificateResponsePayload
    from ldapmerge.adapters.sqlalchemy import Database
    from ldapmerge.domain.model import CertificateMatchItem, Domain
    from ldapmerge.domain.ports.identity_sources import IdentitySourceGateway
    from ldapmerge.domain.ports.unit_of_work import StoreUnitOfWork
    from ldapmerge.domain.push import PushOutcome, PushReport

UnitOfWorkFactory = Callable[[], "StoreUnitOfWork"]
Progress = Callable[[str], None]

log = getLogger(__name__)


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


def _noop(_message: str) -> None:
    return None


def open_database(*, database_path: Path | str | None = None) -> Database:
    """Start the local store, creating and migrating it if needed."""

    return startup(database_uri=get_database_config(database_path=database_path).uri)


def merge_response(
    domains: list[Domain], response: CertificateResponsePayload
) -> list[Domain]:
    return merge_domains(domains, certificate_items_from_response(response))


def merge_files(initial_path: Path | str, response_path: Path | str) -> list[Domain]:
    """Load a domain list and an Ansible certificate response from disk and merge them."""

    domains = load_domains_file(initial_path)
    response = load_certificate_response_file(response_path)
    merged = merge_response(domains, response)
    log.info(
        "Merged %d domains with %d certificates",
        len(merged),
        count_certificates(merged),
        extra={"domains": len(merged), "certificates": count_certificates(merged)},
    )
    return merged


def record_merge(
    unit_of_work_factory: UnitOfWorkFactory,
    *,
    initial: list[Domain],
    response: CertificateResponsePayload,
    result: list[Domain],
) -> HistoryEntry | None:
    """Store a merge in the history table.

    Storage failures are logged and reported as ``None``; they never fail the merge.
    """

    entry = HistoryEntry(
        initial=domains_to_document(initial),
        response=response.to_document(),
        result=domains_to_document(result),
    )
    try:
        with unit_of_work_factory() as uow:
            saved = uow.repositories.history.add(entry)
            uow.commit()
    except Exception:  # noqa: BLE001
        log.exception("Failed to record merge history")
        return None
    log.debug("Recorded merge history entry %s", saved.id)
    return saved


def pull_domains(gateway: IdentitySourceGateway) -> list[Domain]:
    started = time.perf_counter()
    domains = gateway.list_domains()
    log.info(
        "Pulled %d identity sources",
        len(domains),
        extra={"domains": len(domains), "duration_ms": _elapsed_ms(started)},
    )
    return domains


def push_domains(
    domains: list[Domain],
    gateway: IdentitySourceGateway,
    *,
    on_outcome: Callable[[PushOutcome], None] | None = None,
) -> PushReport:
    started = time.perf_counter()
    report = push_each(domains, gateway.replace_domain, on_outcome=on_outcome)
    log.info(
        "Push finished: %d succeeded, %d failed",
        report.succeeded,
        report.failed,
        extra={
            "succeeded": report.succeeded,
            "failed": report.failed,
            "duration_ms": _elapsed_ms(started),
        },
    )
    return report


def server_urls(domains: list[Domain]) -> list[str]:
    """Distinct LDAP server URLs in first-seen order."""

    return list(dict.fromkeys(server.url for domain in domains for server in domain.ldap_servers))


def fetch_and_merge(
    gateway: IdentitySourceGateway, domains: list[Domain]
) -> tuple[list[Domain], list[CertificateMatchItem]]:
    """Fetch certificates for every server through the gateway and merge them in."""

    items = gateway.fetch_certificates(server_urls(domains))
    return merge_domains(domains, items), items


@dataclass(slots=True)
class SyncResult:
    """Outcome of a pull, merge and push run."""

    domains: list[Domain]
    pulled: int
    certificates: int
    report: PushReport | None
    output: Path | None = None

    @property
    def dry_run(self) -> bool:
        return self.report is None


def sync(
    *,
    gateway: IdentitySourceGateway,
    response: CertificateResponsePayload | None,
    dry_run: bool = False,
    output: Path | str | None = None,
    progress: Progress = _noop,
    on_outcome: Callable[[PushOutcome], None] | None = None,
) -> SyncResult:
    """Pull identity sources, merge in certificates, optionally save, then push.

    Without a ``response`` the certificates are fetched live from NSX for every
    pulled server. With ``dry_run`` the push step is skipped. A failing domain
    during push is reported in the result and does not stop the others.
    """

    started = time.perf_counter()
    log.info("Starting sync", extra={"command": "sync", "dry_run": dry_run})

    progress("Step 1/3: Pulling current configuration from NSX...")
    initial = pull_domains(gateway)
    progress(f"  Fetched {len(initial)} LDAP identity sources")

    if response is None:
        progress("Step 2/3: Fetching certificates from NSX and merging...")
        merged, items = fetch_and_merge(gateway, initial)
        fetched = sum(1 for item in items if item.pem_encoded)
        progress(f"  Fetched certificates for {fetched} of {len(items)} LDAP servers")
    else:
        progress("Step 2/3: Merging with certificate data...")
        merged = merge_response(initial, response)
    certificates = count_certificates(merged)
    log.info(
        "Merge completed",
        extra={"domains": len(merged), "certificates": certificates},
    )
    progress(f"  Merged {len(merged)} domains, {certificates} certificates added")

    written: Path | None = None
    if output is not None:
        written = write_domains_file(merged, output)
        log.info("Saved merged result to %s", written)
        progress(f"  Saved result to {written}")

    report: PushReport | None = None
    if dry_run:
        log.info("Dry run, skipping push")
        progress("Step 3/3: Skipped (dry-run mode)")
    else:
        progress("Step 3/3: Pushing configuration to NSX...")
        report = push_domains(merged, gateway, on_outcome=on_outcome)

    log.info("Sync finished", extra={"duration_ms": _elapsed_ms(started)})
    return SyncResult(
        domains=merged,
        pulled=len(initial),
        certificates=certificates,
        report=report,
        output=written,
    )


def save_profile(
    unit_of_work_factory: UnitOfWorkFactory, profile: ConnectionProfile
) -> ConnectionProfile:
    with unit_of_work_factory() as uow:
        saved = uow.repositories.profiles.save(profile)
        uow.commit()
    log.info("Saved connection profile %s", saved.name)
    return saved


def load_profile(unit_of_work_factory: UnitOfWorkFactory, name: str) -> ConnectionProfile:
    with unit_of_work_factory() as uow:
        return uow.repositories.profiles.get_by_name(name)
