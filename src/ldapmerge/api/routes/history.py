"""Read access to the merge history."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from ldapmerge.adapters.sqlalchemy import Database
from ldapmerge.api.dependencies import get_database, get_optional_database
from ldapmerge.api.schemas import HistoryEntryResponse
from ldapmerge.domain.ports.persistence import DEFAULT_HISTORY_LIMIT

router = APIRouter(prefix="/api/history", tags=["history"])


@router.get("", response_model=list[HistoryEntryResponse])
def list_history(
    database: Annotated[Database | None, Depends(get_optional_database)],
) -> list[HistoryEntryResponse]:
    """Newest entries first."""

    if database is None:
        return []
    with database.unit_of_work() as uow:
        entries = uow.repositories.history.list_recent(limit=DEFAULT_HISTORY_LIMIT)
    return [HistoryEntryResponse.from_entry(entry) for entry in entries]


@router.get("/{entry_id}", response_model=HistoryEntryResponse)
def get_history(
    entry_id: int,
    database: Annotated[Database, Depends(get_database)],
) -> HistoryEntryResponse:
    with database.unit_of_work() as uow:
        entry = uow.repositories.history.get(entry_id)
    return HistoryEntryResponse.from_entry(entry)
