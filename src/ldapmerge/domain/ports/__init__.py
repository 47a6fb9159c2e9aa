"""Ports implemented by adapters and consumed by application services."""

from __future__ import annotations

from .identity_sources import IdentitySourceError, IdentitySourceGateway
from .persistence import (
    ConnectionProfileRepository,
    DuplicateRecordError,
    HistoryRepository,
    RecordNotFoundError,
)
from .unit_of_work import StoreRepositories, StoreUnitOfWork

__all__ = [
    "ConnectionProfileRepository",
    "DuplicateRecordError",
    "HistoryRepository",
    "IdentitySourceError",
    "IdentitySourceGateway",
    "RecordNotFoundError",
    "StoreRepositories",
    "StoreUnitOfWork",
]
