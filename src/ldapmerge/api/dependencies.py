"""Request-scoped access to the store attached to the application."""

from __future__ import annotations

from fastapi import Request

from ldapmerge.adapters.sqlalchemy import Database

from .errors import DatabaseUnavailableError


def get_optional_database(request: Request) -> Database | None:
    return request.app.state.database


def get_database(request: Request) -> Database:
    database = get_optional_database(request)
    if database is None:
        raise DatabaseUnavailableError
    return database
