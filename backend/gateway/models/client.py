"""
Backend Gateway — Client SQLAlchemy Model
===========================================

What:  ORM model representing the `clients` table.
How:   Inherits from the shared DeclarativeBase; Alembic reads it for migrations.
Who:   Used by ClientRepository (ORM queries) and, through its column types,
       by RawClientRepository (typed bind parameters and result columns).

Table Design:
    - id: UUID primary key, generated on insert (gen_random_uuid() on PostgreSQL)
    - name: required text
    - metadata: JSON object, NULL when absent (JSONB on PostgreSQL)
    - created_at / updated_at: timezone-aware timestamps

    Index on created_at DESC serves the default "newest first" listing.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, DateTime, Index, Text, Uuid, text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from gateway.database import Base


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# JSON document column type. none_as_null maps Python None to SQL NULL rather
# than the JSON literal 'null'.
JSONDocument = JSON(none_as_null=True).with_variant(JSONB(none_as_null=True), "postgresql")

Timestamp = DateTime(timezone=True)


class Client(Base):
    """
    A client record.

    Lifecycle:
        1. Created with a name and optional metadata; id and both timestamps
           are assigned at insert (created_at == updated_at)
        2. Partially updated; every write refreshes updated_at
        3. Hard-deleted; no tombstone
    """

    __tablename__ = "clients"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        comment="Unique identifier",
    )

    name: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Client display name",
    )

    # "metadata" is reserved on declarative classes, hence the trailing underscore
    metadata_: Mapped[dict | None] = mapped_column(
        "metadata",
        JSONDocument,
        nullable=True,
        default=None,
        comment="Free-form JSON object; NULL when absent",
    )

    created_at: Mapped[datetime] = mapped_column(
        Timestamp,
        nullable=False,
        default=utc_now,
        server_default=text("CURRENT_TIMESTAMP"),
        comment="When this client was created (UTC)",
    )

    updated_at: Mapped[datetime] = mapped_column(
        Timestamp,
        nullable=False,
        default=utc_now,
        server_default=text("CURRENT_TIMESTAMP"),
        comment="When this client was last modified (UTC)",
    )

    def __repr__(self) -> str:
        return f"<Client(id={self.id}, name='{self.name}', created_at='{self.created_at}')>"


Index("idx_clients_created_at", Client.created_at.desc())
