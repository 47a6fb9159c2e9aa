"""Liveness endpoint with store diagnostics."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError

import ldapmerge
from ldapmerge.adapters.sqlalchemy import Database, database_info
from ldapmerge.api.dependencies import get_optional_database
from ldapmerge.api.schemas import DatabaseInfoResponse, HealthResponse

log = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["system"])


@router.get("/health", response_model=HealthResponse)
def health(
    database: Annotated[Database | None, Depends(get_optional_database)],
) -> HealthResponse:
    """Report status and version, plus database details when the store is reachable."""

    response = HealthResponse(status="ok", version=ldapmerge.__version__)
    if database is None:
        return response
    try:
        response.database = DatabaseInfoResponse.from_info(database_info(database))
    except (SQLAlchemyError, OSError) as exc:
        log.warning("Database diagnostics unavailable: %s", exc)
    return response
