"""Exception handlers that turn failures into ``{"error": {...}}`` JSON bodies.

Validation problems answer 400, missing records 404, name clashes 409 and
an unavailable store 503. Anything else is logged and answered with a
generic 500 that does not leak internals.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ldapmerge.adapters.payloads import InvalidPayloadError
from ldapmerge.domain.ports.persistence import DuplicateRecordError, RecordNotFoundError

if TYPE_CHECKING:
    from fastapi import FastAPI

log = logging.getLogger(__name__)


class DatabaseUnavailableError(RuntimeError):
    """Raised by endpoints that need the store when the server runs without one."""

    def __init__(self) -> None:
        super().__init__("Database not available")


def error_body(code: str, message: str, details: list[dict[str, object]] | None = None) -> dict:
    error: dict[str, object] = {"code": code, "message": message}
    if details:
        error["details"] = details
    return {"error": error}


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(
        RequestValidationError,
        _validation_error_handler,  # pyright: ignore[reportArgumentType]
    )
    app.add_exception_handler(InvalidPayloadError, _invalid_payload_handler)
    app.add_exception_handler(RecordNotFoundError, _not_found_handler)
    app.add_exception_handler(DuplicateRecordError, _duplicate_handler)
    app.add_exception_handler(DatabaseUnavailableError, _unavailable_handler)
    app.add_exception_handler(Exception, _generic_error_handler)


async def _validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    log.warning("Validation error on %s: %s", request.url.path, exc.errors())
    details: list[dict[str, object]] = [
        {
            "field": ".".join(str(part) for part in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body("VALIDATION_ERROR", "Invalid request data", details),
    )


async def _invalid_payload_handler(request: Request, exc: Exception) -> JSONResponse:
    log.warning("Invalid payload on %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body("VALIDATION_ERROR", str(exc)),
    )


async def _not_found_handler(request: Request, exc: Exception) -> JSONResponse:
    log.info("Not found on %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content=error_body("NOT_FOUND", str(exc)),
    )


async def _duplicate_handler(request: Request, exc: Exception) -> JSONResponse:
    log.info("Conflict on %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content=error_body("CONFLICT", str(exc)),
    )


async def _unavailable_handler(request: Request, exc: Exception) -> JSONResponse:
    log.error("%s on %s", exc, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content=error_body("DATABASE_UNAVAILABLE", str(exc)),
    )


async def _generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    log.error("Unhandled exception on %s: %s", request.url.path, exc, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("INTERNAL_ERROR", "An unexpected error occurred"),
    )
