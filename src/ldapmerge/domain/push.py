"""Per-domain push of merged identity sources to a remote system."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from ldapmerge.domain.ports.identity_sources import IdentitySourceError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from ldapmerge.domain.model import Domain

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PushOutcome:
    domain_id: str
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


@dataclass(frozen=True, slots=True)
class PushReport:
    """Result of pushing a batch of domains, one outcome per attempted domain."""

    outcomes: tuple[PushOutcome, ...] = ()

    @property
    def succeeded(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.succeeded)

    @property
    def failed(self) -> int:
        return len(self.outcomes) - self.succeeded

    @property
    def failed_ids(self) -> tuple[str, ...]:
        return tuple(outcome.domain_id for outcome in self.outcomes if not outcome.succeeded)

    @property
    def ok(self) -> bool:
        return self.failed == 0


def push_domains(
    domains: Iterable[Domain],
    write: Callable[[Domain], object],
    *,
    on_outcome: Callable[[PushOutcome], None] | None = None,
) -> PushReport:
    """Write every domain with ``write``; a failing domain never stops the rest.

    Only :class:`IdentitySourceError` counts as a per-domain failure. Anything
    else propagates.
    """

    outcomes: list[PushOutcome] = []
    for domain in domains:
        try:
            write(domain)
        except IdentitySourceError as exc:
            log.warning("Failed to push identity source %s: %s", domain.id, exc)
            outcome = PushOutcome(domain_id=domain.id, error=str(exc))
        else:
            log.info("Pushed identity source %s", domain.id)
            outcome = PushOutcome(domain_id=domain.id)
        outcomes.append(outcome)
        if on_outcome is not None:
            on_outcome(outcome)
    return PushReport(outcomes=tuple(outcomes))
