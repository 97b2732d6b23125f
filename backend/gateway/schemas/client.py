"""
Backend Gateway — Client Request/Response Schemas
===================================================

What:  Pydantic models for the clients resource: create/update payloads and
       the ClientRecord value returned by both repository implementations.
How:   FastAPI validates request bodies against ClientCreate / ClientUpdate and
       serializes ClientRecord responses.

Partial updates:
    ClientUpdate distinguishes three states per field using Pydantic's
    `model_fields_set`:
        field omitted          → not in changes(), column untouched
        "metadata": null       → changes()["metadata"] is None, column cleared
        "metadata": {...}      → changes()["metadata"] is the new object
    "name" cannot be cleared; an explicit null is a validation error.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator


class ClientCreate(BaseModel):
    """Payload for POST /clients (and each item of POST /clients/batch)."""
    name: str = Field(min_length=1, description="Client display name")
    metadata: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Optional JSON object; omit or send null for none",
    )

    model_config = {"extra": "forbid"}


class ClientUpdate(BaseModel):
    """Payload for PATCH /clients/{id}. Only the fields sent are applied."""
    name: Optional[str] = Field(default=None, min_length=1, description="New display name")
    metadata: Optional[Dict[str, Any]] = Field(
        default=None,
        description="New JSON object, or null to clear",
    )

    model_config = {"extra": "forbid"}

    @field_validator("name")
    @classmethod
    def reject_null_name(cls, v: Optional[str]) -> str:
        if v is None:
            raise ValueError("name cannot be null")
        return v

    def changes(self) -> Dict[str, Any]:
        """The supplied fields only, keyed by field name."""
        return self.model_dump(include=set(self.model_fields_set))


class ClientRecord(BaseModel):
    """
    A persisted client, identical whichever query strategy produced it.
    """
    id: uuid.UUID = Field(description="Unique client identifier (UUID)")
    name: str = Field(description="Client display name")
    metadata: Optional[Dict[str, Any]] = Field(default=None, description="JSON object or null")
    created_at: datetime = Field(description="Creation timestamp (UTC)")
    updated_at: datetime = Field(description="Last modification timestamp (UTC)")

    @field_validator("created_at", "updated_at")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        # SQLite hands back naive datetimes; stored values are always UTC
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


class ClientCountResponse(BaseModel):
    count: int = Field(description="Total number of clients")
