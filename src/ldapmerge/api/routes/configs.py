"""Saved NSX connection profiles. Passwords are accepted but never returned."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from ldapmerge.adapters.sqlalchemy import Database
from ldapmerge.api.dependencies import get_database, get_optional_database
from ldapmerge.api.schemas import ConnectionProfileCreate, ConnectionProfileResponse
from ldapmerge.app import save_profile
from ldapmerge.domain.model import ConnectionProfile

router = APIRouter(prefix="/api/configs", tags=["config"])


@router.get("", response_model=list[ConnectionProfileResponse])
def list_configs(
    database: Annotated[Database | None, Depends(get_optional_database)],
) -> list[ConnectionProfileResponse]:
    if database is None:
        return []
    with database.unit_of_work() as uow:
        profiles = uow.repositories.profiles.list_all()
    return [ConnectionProfileResponse.from_profile(profile) for profile in profiles]


@router.post(
    "",
    response_model=ConnectionProfileResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_config(
    body: ConnectionProfileCreate,
    database: Annotated[Database, Depends(get_database)],
) -> ConnectionProfileResponse:
    profile = ConnectionProfile(
        name=body.name,
        host=body.host,
        username=body.username,
        password=body.password,
        description=body.description,
        insecure=body.insecure,
    )
    saved = save_profile(database.unit_of_work, profile)
    return ConnectionProfileResponse.from_profile(saved)


@router.get("/{config_id}", response_model=ConnectionProfileResponse)
def get_config(
    config_id: int,
    database: Annotated[Database, Depends(get_database)],
) -> ConnectionProfileResponse:
    with database.unit_of_work() as uow:
        profile = uow.repositories.profiles.get(config_id)
    return ConnectionProfileResponse.from_profile(profile)


@router.delete("/{config_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_config(
    config_id: int,
    database: Annotated[Database, Depends(get_database)],
) -> Response:
    with database.unit_of_work() as uow:
        uow.repositories.profiles.delete(config_id)
        uow.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
