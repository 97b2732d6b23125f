"""
Backend Gateway — Test Configuration (conftest.py)
====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── db_engine: fresh in-memory SQLite engine with the clients table
    ├── session_factory / db_session: AsyncSession bound to db_engine
    ├── repository: ClientRepository and RawClientRepository (parametrized)
    ├── mock_repository: AsyncMock standing in for a repository
    ├── sample_record: a ClientRecord for service/route tests
    └── test_client: HTTPX AsyncClient wired to the app with db overrides
"""

import os

# Override settings for testing BEFORE any gateway imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["ENVIRONMENT"] = "test"
os.environ["LOG_LEVEL"] = "WARNING"

from datetime import datetime, timezone
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from gateway.database import Base, build_engine, get_db_session, get_engine
from gateway.models.client import Client  # noqa: F401  (registers the table)
from gateway.repositories import ClientRepository, RawClientRepository
from gateway.repositories.base import ClientRepositoryBase
from gateway.schemas.client import ClientRecord


# ══════════════════════════════════════════════════════════════════════════
# Database Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_engine():
    """
    In-memory SQLite engine with the schema created from the ORM metadata.

    One StaticPool connection per engine, so every session in a test sees
    the same database and nothing leaks between tests.
    """
    engine = build_engine("sqlite+aiosqlite://")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture(params=["orm", "raw"])
def repository(request, db_session) -> ClientRepositoryBase:
    """
    Each repository test runs once per query strategy; both must satisfy
    the same contract.
    """
    if request.param == "orm":
        return ClientRepository(db_session)
    return RawClientRepository(db_session)


# ══════════════════════════════════════════════════════════════════════════
# Service Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_repository():
    """
    AsyncMock with the repository interface.

    Usage:
        mock_repository.find_by_id.return_value = None
        with pytest.raises(NotFoundError):
            await ClientService(mock_repository).get_by_id(uuid4())
    """
    return AsyncMock(spec=ClientRepositoryBase)


@pytest.fixture
def sample_record() -> ClientRecord:
    now = datetime.now(timezone.utc)
    return ClientRecord(
        id=uuid4(),
        name="Acme",
        metadata={"tier": "gold"},
        created_at=now,
        updated_at=now,
    )


# ══════════════════════════════════════════════════════════════════════════
# HTTP Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def test_client(db_engine, session_factory):
    """
    HTTPX AsyncClient talking to the FastAPI app through ASGITransport.

    The session dependency is replaced with one bound to the test engine,
    keeping the commit-on-success / rollback-on-error behaviour.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    from gateway.main import app

    async def override_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_db_session
    app.dependency_overrides[get_engine] = lambda: db_engine

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
