# Repositories package init
"""
Backend Gateway — Data Access Layer
=====================================

What:  Translates client CRUD intents into SQL against the `clients` table.
How:   One abstract contract, two query strategies:
       - ClientRepository:    SQLAlchemy ORM statements and unit of work
       - RawClientRepository: textual SQL with typed bound parameters

Both take an AsyncSession in their constructor and return ClientRecord
values, so the service layer cannot tell them apart.

Outcome conventions (both implementations):
    missing row on read/update → None
    missing row on delete      → False
    database fault             → SQLAlchemy exception, propagated untouched
"""

from gateway.repositories.base import ClientRepositoryBase
from gateway.repositories.client_repository import ClientRepository
from gateway.repositories.raw_client_repository import RawClientRepository

__all__ = ["ClientRepositoryBase", "ClientRepository", "RawClientRepository"]
