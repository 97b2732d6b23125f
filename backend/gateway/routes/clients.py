"""
Backend Gateway — Clients Route Handlers
==========================================

What:  REST endpoints for the clients resource.
How:   Each handler receives a ClientService built per request by a dependency
       factory; the service wraps either the ORM repository (/clients/...) or
       the raw SQL repository (/clients/raw/...).
Who:   API consumers of the gateway.

Route Inventory:
    POST   /clients                 create                      201
    GET    /clients                 list, newest first          200
    GET    /clients/stats/count     total count                 200
    GET    /clients/search?key=     metadata key lookup         200
    POST   /clients/batch           atomic multi-create         201
    GET    /clients/raw/all         list (raw SQL)              200
    POST   /clients/raw             create (raw SQL)            201
    GET    /clients/raw/{id}        read (raw SQL)              200 / 404
    PATCH  /clients/raw/{id}        partial update (raw SQL)    200 / 404
    DELETE /clients/raw/{id}        delete (raw SQL)            204 / 404
    GET    /clients/{id}            read                        200 / 404
    PATCH  /clients/{id}            partial update              200 / 404
    DELETE /clients/{id}            delete                      204 / 404

Fixed paths are registered before /clients/{client_id} so that "search",
"batch" and "raw" are never parsed as ids.
"""

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from gateway.database import get_db_session
from gateway.repositories import ClientRepository, RawClientRepository
from gateway.schemas.client import (
    ClientCountResponse,
    ClientCreate,
    ClientRecord,
    ClientUpdate,
)
from gateway.schemas.health import ErrorResponse
from gateway.services.client_service import ClientService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/clients", tags=["Clients"])

NOT_FOUND = {404: {"description": "Client not found", "model": ErrorResponse}}


# ── Dependencies ──────────────────────────────────────────────────────────
def get_client_service(db: AsyncSession = Depends(get_db_session)) -> ClientService:
    """ClientService over the ORM repository, bound to this request's session."""
    return ClientService(ClientRepository(db))


def get_raw_client_service(db: AsyncSession = Depends(get_db_session)) -> ClientService:
    """ClientService over the raw SQL repository, bound to this request's session."""
    return ClientService(RawClientRepository(db))


# ── Collection ────────────────────────────────────────────────────────────
@router.post("", status_code=201, response_model=ClientRecord, summary="Create a client")
async def create_client(
    data: ClientCreate,
    service: ClientService = Depends(get_client_service),
) -> ClientRecord:
    return await service.create(data)


@router.get("", response_model=List[ClientRecord], summary="List all clients, newest first")
async def list_clients(
    service: ClientService = Depends(get_client_service),
) -> List[ClientRecord]:
    return await service.find_all()


@router.get("/stats/count", response_model=ClientCountResponse, summary="Count clients")
async def count_clients(
    service: ClientService = Depends(get_client_service),
) -> ClientCountResponse:
    return ClientCountResponse(count=await service.count())


@router.get(
    "/search",
    response_model=List[ClientRecord],
    summary="Find clients whose metadata has a given top-level key",
)
async def search_clients(
    key: str = Query(min_length=1, description="Top-level metadata key to look for"),
    service: ClientService = Depends(get_client_service),
) -> List[ClientRecord]:
    return await service.find_by_metadata_key(key)


@router.post(
    "/batch",
    status_code=201,
    response_model=List[ClientRecord],
    summary="Create several clients atomically",
    description="Either every client in the request is created or none is.",
)
async def create_clients_batch(
    items: List[ClientCreate] = Body(min_length=1),
    service: ClientService = Depends(get_client_service),
) -> List[ClientRecord]:
    return await service.create_many(items)


# ── Raw SQL variants ──────────────────────────────────────────────────────
@router.get("/raw/all", response_model=List[ClientRecord], summary="List all clients (raw SQL)")
async def list_clients_raw(
    service: ClientService = Depends(get_raw_client_service),
) -> List[ClientRecord]:
    return await service.find_all()


@router.post("/raw", status_code=201, response_model=ClientRecord, summary="Create a client (raw SQL)")
async def create_client_raw(
    data: ClientCreate,
    service: ClientService = Depends(get_raw_client_service),
) -> ClientRecord:
    return await service.create(data)


@router.get("/raw/{client_id}", response_model=ClientRecord, responses=NOT_FOUND,
            summary="Get a client by ID (raw SQL)")
async def get_client_raw(
    client_id: UUID,
    service: ClientService = Depends(get_raw_client_service),
) -> ClientRecord:
    return await service.get_by_id(client_id)


@router.patch("/raw/{client_id}", response_model=ClientRecord, responses=NOT_FOUND,
              summary="Partially update a client (raw SQL)")
async def update_client_raw(
    client_id: UUID,
    changes: ClientUpdate,
    service: ClientService = Depends(get_raw_client_service),
) -> ClientRecord:
    return await service.update(client_id, changes)


@router.delete("/raw/{client_id}", status_code=204, responses=NOT_FOUND,
               summary="Delete a client (raw SQL)")
async def delete_client_raw(
    client_id: UUID,
    service: ClientService = Depends(get_raw_client_service),
) -> Response:
    await service.delete(client_id)
    return Response(status_code=204)


# ── Single client ─────────────────────────────────────────────────────────
@router.get("/{client_id}", response_model=ClientRecord, responses=NOT_FOUND,
            summary="Get a client by ID")
async def get_client(
    client_id: UUID,
    service: ClientService = Depends(get_client_service),
) -> ClientRecord:
    return await service.get_by_id(client_id)


@router.patch(
    "/{client_id}",
    response_model=ClientRecord,
    responses=NOT_FOUND,
    summary="Partially update a client",
    description=(
        "Only the fields present in the body change. Send \"metadata\": null to "
        "clear metadata; omit it to leave metadata as it is."
    ),
)
async def update_client(
    client_id: UUID,
    changes: ClientUpdate,
    service: ClientService = Depends(get_client_service),
) -> ClientRecord:
    return await service.update(client_id, changes)


@router.delete("/{client_id}", status_code=204, responses=NOT_FOUND, summary="Delete a client")
async def delete_client(
    client_id: UUID,
    service: ClientService = Depends(get_client_service),
) -> Response:
    await service.delete(client_id)
    return Response(status_code=204)
