"""Ports for the local history and connection-profile store."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ldapmerge.domain.model import ConnectionProfile, HistoryEntry

DEFAULT_HISTORY_LIMIT = 100


class RecordNotFoundError(LookupError):
    """Raised when a stored record does not exist."""

    def __init__(self, kind: str, key: object) -> None:
        super().__init__(f"{kind} {key!r} not found")
        self.kind = kind
        self.key = key


class DuplicateRecordError(ValueError):
    """Raised when a record would violate a uniqueness constraint."""

    def __init__(self, kind: str, key: object) -> None:
        super().__init__(f"{kind} {key!r} already exists")
        self.kind = kind
        self.key = key


@runtime_checkable
class HistoryRepository(Protocol):
    """Append-only audit trail of merge operations."""

    def add(self, entry: HistoryEntry) -> HistoryEntry: ...

    def get(self, entry_id: int) -> HistoryEntry: ...

    def list_recent(self, *, limit: int = DEFAULT_HISTORY_LIMIT) -> list[HistoryEntry]: ...

    def count(self) -> int: ...


@runtime_checkable
class ConnectionProfileRepository(Protocol):
    """Named NSX connection settings."""

    def save(self, profile: ConnectionProfile) -> ConnectionProfile: ...

    def get(self, profile_id: int) -> ConnectionProfile: ...

    def get_by_name(self, name: str) -> ConnectionProfile: ...

    def list_all(self) -> list[ConnectionProfile]: ...

    def delete(self, profile_id: int) -> None: ...

    def count(self) -> int: ...
