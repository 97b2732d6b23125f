"""
Backend Gateway — Client Repository (raw SQL)
===============================================

What:  ClientRepository implemented with hand-written SQL.
How:   Every statement is a text() construct. Values always travel as bound
       parameters with explicit SQLAlchemy types (Uuid, JSON document,
       timezone-aware timestamp), and result columns are typed the same way,
       so rows decode exactly like the ORM path.

Partial UPDATE composition:
    SET clauses come only from the fields present in ClientUpdate.changes(),
    using a fixed field → column whitelist. `updated_at` is always appended
    last, followed by the `WHERE id = :id` predicate. No value is ever
    formatted into the SQL string.

    changes = {"metadata": None}
    → UPDATE clients SET metadata = :metadata, updated_at = :updated_at
      WHERE id = :id RETURNING ...
"""

import logging
import uuid
from typing import Any, Dict, List, Optional

from sqlalchemy import Text, Uuid, bindparam, text
from sqlalchemy.sql.elements import TextClause

from gateway.models.client import JSONDocument, Timestamp, utc_now
from gateway.repositories.base import ClientRepositoryBase
from gateway.schemas.client import ClientRecord, ClientUpdate

logger = logging.getLogger(__name__)

COLUMNS = "id, name, metadata, created_at, updated_at"

# Bind/result types per column name
COLUMN_TYPES = {
    "id": Uuid(as_uuid=True),
    "name": Text(),
    "metadata": JSONDocument,
    "created_at": Timestamp,
    "updated_at": Timestamp,
}

# ClientUpdate field → column it writes
UPDATABLE_COLUMNS = {
    "name": "name",
    "metadata": "metadata",
}


def _statement(sql: str, *params: str, returns_rows: bool = True) -> TextClause:
    """text() with typed bind parameters and, for row-returning SQL, typed columns."""
    stmt = text(sql).bindparams(
        *(bindparam(name, type_=COLUMN_TYPES[name]) for name in params)
    )
    if returns_rows:
        return stmt.columns(**COLUMN_TYPES)
    return stmt


class RawClientRepository(ClientRepositoryBase):
    """Client data access through parameterized SQL."""

    strategy = "raw"

    async def _fetch_all(self, stmt, params: Optional[Dict[str, Any]] = None) -> List[ClientRecord]:
        result = await self.session.execute(stmt, params or {})
        return [ClientRecord.model_validate(dict(row)) for row in result.mappings().all()]

    async def _fetch_one(self, stmt, params: Dict[str, Any]) -> Optional[ClientRecord]:
        result = await self.session.execute(stmt, params)
        row = result.mappings().first()
        return ClientRecord.model_validate(dict(row)) if row is not None else None

    async def find_all(self) -> List[ClientRecord]:
        logger.debug("[raw] Finding all clients")
        stmt = _statement(f"SELECT {COLUMNS} FROM clients ORDER BY created_at DESC")
        return await self._fetch_all(stmt)

    async def find_by_id(self, client_id: uuid.UUID) -> Optional[ClientRecord]:
        logger.debug("[raw] Finding client by ID: %s", client_id)
        stmt = _statement(f"SELECT {COLUMNS} FROM clients WHERE id = :id", "id")
        return await self._fetch_one(stmt, {"id": client_id})

    async def create(
        self,
        name: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> ClientRecord:
        logger.debug("[raw] Creating client: %s", name)
        now = utc_now()
        stmt = _statement(
            f"""
            INSERT INTO clients ({COLUMNS})
            VALUES (:id, :name, :metadata, :created_at, :updated_at)
            RETURNING {COLUMNS}
            """,
            "id", "name", "metadata", "created_at", "updated_at",
        )
        result = await self.session.execute(
            stmt,
            {
                "id": uuid.uuid4(),
                "name": name,
                "metadata": metadata,
                "created_at": now,
                "updated_at": now,
            },
        )
        return ClientRecord.model_validate(dict(result.mappings().one()))

    async def update(
        self,
        client_id: uuid.UUID,
        changes: ClientUpdate,
    ) -> Optional[ClientRecord]:
        logger.debug("[raw] Updating client ID: %s", client_id)
        fields = changes.changes()

        assignments: List[str] = []
        params: Dict[str, Any] = {}
        for field, column in UPDATABLE_COLUMNS.items():
            if field in fields:
                assignments.append(f"{column} = :{column}")
                params[column] = fields[field]

        if not assignments:
            return await self.find_by_id(client_id)

        assignments.append("updated_at = :updated_at")
        params["updated_at"] = utc_now()
        params["id"] = client_id

        stmt = _statement(
            f"""
            UPDATE clients
            SET {", ".join(assignments)}
            WHERE id = :id
            RETURNING {COLUMNS}
            """,
            *params.keys(),
        )
        return await self._fetch_one(stmt, params)

    async def delete(self, client_id: uuid.UUID) -> bool:
        logger.debug("[raw] Deleting client ID: %s", client_id)
        stmt = _statement("DELETE FROM clients WHERE id = :id", "id", returns_rows=False)
        result = await self.session.execute(stmt, {"id": client_id})
        return result.rowcount > 0

    async def exists(self, client_id: uuid.UUID) -> bool:
        stmt = _statement("SELECT COUNT(*) FROM clients WHERE id = :id", "id", returns_rows=False)
        result = await self.session.execute(stmt, {"id": client_id})
        return result.scalar_one() > 0

    async def count(self) -> int:
        result = await self.session.execute(text("SELECT COUNT(*) FROM clients"))
        return result.scalar_one()

    async def find_by_metadata_key(self, key: str) -> List[ClientRecord]:
        logger.debug("[raw] Finding clients with metadata key: %s", key)
        if self.dialect_name == "postgresql":
            predicate, params = "jsonb_exists(metadata, :key)", {"key": key}
        elif self.dialect_name == "sqlite":
            predicate = (
                "EXISTS (SELECT 1 FROM json_each(clients.metadata) AS entry"
                " WHERE entry.key = :key)"
            )
            params = {"key": key}
        else:
            raise NotImplementedError(
                f"Metadata key search is not supported on {self.dialect_name}"
            )

        stmt = text(
            f"SELECT {COLUMNS} FROM clients WHERE {predicate} ORDER BY created_at DESC"
        ).columns(**COLUMN_TYPES)
        return await self._fetch_all(stmt, params)
