"""
Backend Gateway — Client Repository (ORM)
===========================================

What:  ClientRepository implemented with SQLAlchemy ORM statements.
How:   select() for reads, session.get() for primary-key lookups, and the
       unit of work (add / attribute assignment / delete + flush) for writes.
       Flushing inside the repository surfaces constraint errors at the call
       site; the commit belongs to the request's session dependency.
"""

import logging
import uuid
from typing import Any, Dict, List, Optional

from sqlalchemy import desc, func, select

from gateway.models.client import Client, utc_now
from gateway.repositories.base import ClientRepositoryBase
from gateway.schemas.client import ClientRecord, ClientUpdate

logger = logging.getLogger(__name__)


def to_record(client: Client) -> ClientRecord:
    """Map an ORM instance onto the shared ClientRecord shape."""
    return ClientRecord(
        id=client.id,
        name=client.name,
        metadata=client.metadata_,
        created_at=client.created_at,
        updated_at=client.updated_at,
    )


class ClientRepository(ClientRepositoryBase):
    """Client data access through the ORM."""

    strategy = "orm"

    async def find_all(self) -> List[ClientRecord]:
        logger.debug("[orm] Finding all clients")
        result = await self.session.execute(
            select(Client).order_by(desc(Client.created_at))
        )
        return [to_record(client) for client in result.scalars().all()]

    async def find_by_id(self, client_id: uuid.UUID) -> Optional[ClientRecord]:
        logger.debug("[orm] Finding client by ID: %s", client_id)
        client = await self.session.get(Client, client_id)
        return to_record(client) if client is not None else None

    async def create(
        self,
        name: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> ClientRecord:
        logger.debug("[orm] Creating client: %s", name)
        now = utc_now()
        client = Client(
            id=uuid.uuid4(),
            name=name,
            metadata_=metadata,
            created_at=now,
            updated_at=now,
        )
        self.session.add(client)
        await self.session.flush()
        return to_record(client)

    async def update(
        self,
        client_id: uuid.UUID,
        changes: ClientUpdate,
    ) -> Optional[ClientRecord]:
        logger.debug("[orm] Updating client ID: %s", client_id)
        client = await self.session.get(Client, client_id)
        if client is None:
            return None

        fields = changes.changes()
        if not fields:
            return to_record(client)

        if "name" in fields:
            client.name = fields["name"]
        if "metadata" in fields:
            client.metadata_ = fields["metadata"]
        client.updated_at = utc_now()

        await self.session.flush()
        return to_record(client)

    async def delete(self, client_id: uuid.UUID) -> bool:
        logger.debug("[orm] Deleting client ID: %s", client_id)
        client = await self.session.get(Client, client_id)
        if client is None:
            return False
        await self.session.delete(client)
        await self.session.flush()
        return True

    async def exists(self, client_id: uuid.UUID) -> bool:
        result = await self.session.execute(
            select(func.count()).select_from(Client).where(Client.id == client_id)
        )
        return result.scalar_one() > 0

    async def count(self) -> int:
        result = await self.session.execute(select(func.count()).select_from(Client))
        return result.scalar_one()

    async def find_by_metadata_key(self, key: str) -> List[ClientRecord]:
        logger.debug("[orm] Finding clients with metadata key: %s", key)
        if self.dialect_name == "postgresql":
            has_key = func.jsonb_exists(Client.metadata_, key)
        elif self.dialect_name == "sqlite":
            # Keys compare verbatim, dots and quotes included
            entries = func.json_each(Client.metadata_).table_valued("key")
            has_key = select(1).select_from(entries).where(entries.c.key == key).exists()
        else:
            raise NotImplementedError(
                f"Metadata key search is not supported on {self.dialect_name}"
            )

        result = await self.session.execute(
            select(Client).where(has_key).order_by(desc(Client.created_at))
        )
        return [to_record(client) for client in result.scalars().all()]
