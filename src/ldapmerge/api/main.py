"""FastAPI application factory.

Routes are registered explicitly. The store is passed in by the caller, who
also owns its lifetime; without one the server still merges but keeps no
history and cannot manage connection profiles.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI

import ldapmerge

from .errors import register_error_handlers
from .routes import configs, health, history, merge

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from ldapmerge.adapters.sqlalchemy import Database

log = logging.getLogger(__name__)

DESCRIPTION = """\
Merge LDAP identity source configurations with SSL certificates fetched by
Ansible, keep an audit history of merges and manage NSX Manager connection
profiles.

This API does not implement authentication. Put it behind a reverse proxy
for anything beyond local use.
"""


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    log.info(
        "ldapmerge API started (database: %s)",
        "enabled" if app.state.database is not None else "disabled",
    )
    yield
    log.info("ldapmerge API shutting down")


def create_app(database: Database | None = None) -> FastAPI:
    app = FastAPI(
        title="ldapmerge API",
        version=ldapmerge.__version__,
        description=DESCRIPTION,
        lifespan=lifespan,
    )
    app.state.database = database

    app.include_router(merge.router)
    app.include_router(health.router)
    app.include_router(history.router)
    app.include_router(configs.router)

    register_error_handlers(app)
    return app
