"""
Backend Gateway — Abstract Client Repository
==============================================

What:  The contract every client repository implements, plus the pieces
       shared by all implementations (bulk insert, dialect lookup).
How:   Concrete classes implement the single-row operations; create_many
       composes them inside one transaction from gateway.database.
Who:   Constructed per request by the route dependencies and handed to
       ClientService.
"""

import logging
import uuid
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from gateway.database import run_in_transaction
from gateway.schemas.client import ClientCreate, ClientRecord, ClientUpdate

logger = logging.getLogger(__name__)


class ClientRepositoryBase(ABC):
    """
    Abstract data access for the `clients` table.

    Contract:
        - Reads of a missing id return None; they never raise
        - update() applies only ClientUpdate.changes() and refreshes updated_at
          in the same write; with no changes it is a plain find_by_id()
        - delete() reports whether a row was removed
        - create_many() inserts all rows or none
        - Database errors propagate unchanged
    """

    #: Short label used in log lines ("orm" / "raw")
    strategy: str = "base"

    def __init__(self, session: AsyncSession):
        self.session = session

    @property
    def dialect_name(self) -> str:
        """Name of the SQL dialect behind the session (postgresql, sqlite, ...)."""
        return self.session.get_bind().dialect.name

    @abstractmethod
    async def find_all(self) -> List[ClientRecord]:
        """All clients, newest first. Empty list when the table is empty."""
        ...

    @abstractmethod
    async def find_by_id(self, client_id: uuid.UUID) -> Optional[ClientRecord]:
        """The client with this id, or None."""
        ...

    @abstractmethod
    async def create(
        self,
        name: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> ClientRecord:
        """
        Insert one client.

        id, created_at and updated_at are assigned here; created_at equals
        updated_at on the returned record.
        """
        ...

    @abstractmethod
    async def update(
        self,
        client_id: uuid.UUID,
        changes: ClientUpdate,
    ) -> Optional[ClientRecord]:
        """Apply the supplied fields. None when no row has this id."""
        ...

    @abstractmethod
    async def delete(self, client_id: uuid.UUID) -> bool:
        ...

    @abstractmethod
    async def exists(self, client_id: uuid.UUID) -> bool:
        ...

    @abstractmethod
    async def count(self) -> int:
        ...

    @abstractmethod
    async def find_by_metadata_key(self, key: str) -> List[ClientRecord]:
        """
        Clients whose metadata object has the top-level key `key`, newest first.

        A key whose value is JSON null still counts as present.
        """
        ...

    async def create_many(self, items: Sequence[ClientCreate]) -> List[ClientRecord]:
        """
        Insert every item as one atomic unit.

        Any failing insert rolls back the whole batch and the original
        database error is re-raised; no partial batch is ever visible.
        """
        logger.debug("[%s] Creating %d clients in one transaction", self.strategy, len(items))

        async def insert_all(_session: AsyncSession) -> List[ClientRecord]:
            return [await self.create(item.name, item.metadata) for item in items]

        return await run_in_transaction(self.session, insert_all)
