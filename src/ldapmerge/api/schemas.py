"""Response and request bodies of the HTTP API."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from ldapmerge.adapters.sqlalchemy import DatabaseInfo
    from ldapmerge.domain.model import ConnectionProfile, HistoryEntry


class DatabaseInfoResponse(BaseModel):
    path: str
    size: int
    size_human: str
    version: str
    tables: int
    wal_mode: bool
    history_count: int
    config_count: int

    @classmethod
    def from_info(cls, info: DatabaseInfo) -> DatabaseInfoResponse:
        return cls(
            path=info.path,
            size=info.size,
            size_human=info.size_human,
            version=info.version,
            tables=info.tables,
            wal_mode=info.wal_mode,
            history_count=info.history_count,
            config_count=info.config_count,
        )


class HealthResponse(BaseModel):
    model_config = ConfigDict(json_schema_extra={"example": {"status": "ok", "version": "1.0.0"}})

    status: str = "ok"
    version: str
    database: DatabaseInfoResponse | None = None


class HistoryEntryResponse(BaseModel):
    id: int
    created_at: datetime | None = None
    initial: Any = None
    response: Any = None
    result: Any = None

    @classmethod
    def from_entry(cls, entry: HistoryEntry) -> HistoryEntryResponse:
        return cls(
            id=entry.id or 0,
            created_at=entry.created_at,
            initial=entry.initial,
            response=entry.response,
            result=entry.result,
        )


class ConnectionProfileCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    host: str = Field(min_length=1, description="NSX Manager URL, e.g. https://nsx.example.com")
    username: str = Field(min_length=1)
    password: str = ""
    description: str = ""
    insecure: bool = False


class ConnectionProfileResponse(BaseModel):
    """A saved NSX connection. The password is never included."""

    id: int
    name: str
    description: str = ""
    host: str
    username: str
    insecure: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_profile(cls, profile: ConnectionProfile) -> ConnectionProfileResponse:
        return cls(
            id=profile.id or 0,
            name=profile.name,
            description=profile.description,
            host=profile.host,
            username=profile.username,
            insecure=profile.insecure,
            created_at=profile.created_at,
            updated_at=profile.updated_at,
        )
