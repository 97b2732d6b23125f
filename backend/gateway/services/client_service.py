"""
Backend Gateway — Client Service (Business Logic)
===================================================

What:  Thin orchestration over a client repository.
How:   Receives the repository in its constructor; passes most calls straight
       through and turns repository "absent" results into NotFoundError.
Who:   Called by the /clients route handlers.

Existence-then-act (update, delete):
    1. get_by_id() first, so a missing id fails with a precise NotFoundError
       before any write is attempted
    2. Run the write; if the repository still reports absent (the row was
       deleted between the check and the write) raise NotFoundError as well

    The write's own absent detection is the final authority; the pre-check
    only produces the error message.

Database errors are never caught here: they reach the global handlers as the
original SQLAlchemy exceptions.
"""

import logging
import uuid
from typing import List, Sequence

from gateway.exceptions import NotFoundError
from gateway.repositories.base import ClientRepositoryBase
from gateway.schemas.client import ClientCreate, ClientRecord, ClientUpdate

logger = logging.getLogger(__name__)


class ClientService:
    """
    Business logic layer for client operations.

    Responsibilities:
        - get_by_id(): lookup with not-found translation
        - update() / delete(): existence check, write, not-found translation
        - everything else: pass-through to the repository
    """

    def __init__(self, repository: ClientRepositoryBase):
        self.repository = repository

    async def create(self, data: ClientCreate) -> ClientRecord:
        logger.info("Creating new client: %s", data.name)
        return await self.repository.create(data.name, data.metadata)

    async def create_many(self, items: Sequence[ClientCreate]) -> List[ClientRecord]:
        logger.info("Creating %d clients in one batch", len(items))
        return await self.repository.create_many(items)

    async def find_all(self) -> List[ClientRecord]:
        logger.info("Fetching all clients")
        return await self.repository.find_all()

    async def get_by_id(self, client_id: uuid.UUID) -> ClientRecord:
        """
        Retrieve a single client.

        Raises:
            NotFoundError: No client has this id (→ 404)
        """
        logger.info("Fetching client with ID: %s", client_id)
        client = await self.repository.find_by_id(client_id)
        if client is None:
            raise NotFoundError(resource="client", resource_id=str(client_id))
        return client

    async def update(self, client_id: uuid.UUID, changes: ClientUpdate) -> ClientRecord:
        """
        Apply a partial update to an existing client.

        Raises:
            NotFoundError: No client has this id, before or during the write
        """
        logger.info("Updating client with ID: %s", client_id)
        await self.get_by_id(client_id)

        updated = await self.repository.update(client_id, changes)
        if updated is None:
            raise NotFoundError(resource="client", resource_id=str(client_id))
        return updated

    async def delete(self, client_id: uuid.UUID) -> None:
        """
        Delete an existing client.

        Raises:
            NotFoundError: No client has this id, before or during the delete
        """
        logger.info("Deleting client with ID: %s", client_id)
        await self.get_by_id(client_id)

        if not await self.repository.delete(client_id):
            raise NotFoundError(resource="client", resource_id=str(client_id))
        logger.info("Client with ID %s deleted successfully", client_id)

    async def count(self) -> int:
        return await self.repository.count()

    async def exists(self, client_id: uuid.UUID) -> bool:
        return await self.repository.exists(client_id)

    async def find_by_metadata_key(self, key: str) -> List[ClientRecord]:
        logger.info("Searching clients by metadata key: %s", key)
        return await self.repository.find_by_metadata_key(key)
