"""Merge endpoint."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ldapmerge.adapters.payloads import (
    MergeRequestPayload,
    domains_from_payload,
    domains_to_document,
)
from ldapmerge.adapters.sqlalchemy import Database
from ldapmerge.api.dependencies import get_optional_database
from ldapmerge.app import merge_response, record_merge
from ldapmerge.domain.merge import count_certificates

log = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["merge"])


@router.post("/merge")
def merge(
    body: MergeRequestPayload,
    database: Annotated[Database | None, Depends(get_optional_database)],
) -> JSONResponse:
    """Merge ``initial`` domains with the certificates in ``response``.

    Certificates are matched to LDAP servers by exact URL. The merge is saved
    to the history table; a storage failure is logged and the merged domains
    are still returned.
    """

    initial = domains_from_payload(body.initial)
    result = merge_response(initial, body.response)
    log.info(
        "Merged %d domains",
        len(result),
        extra={"domains": len(result), "certificates": count_certificates(result)},
    )
    if database is not None:
        record_merge(database.unit_of_work, initial=initial, response=body.response, result=result)
    return JSONResponse(content=domains_to_document(result))
