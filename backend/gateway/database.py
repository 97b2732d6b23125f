"""
Backend Gateway — Database Session Management
===============================================

What:  Async SQLAlchemy engine, session factory, FastAPI session dependency,
       transaction helper and liveness probe.
How:   Creates an async engine with connection pooling, provides a session
       dependency that auto-commits on success and auto-rolls-back on error.
Who:   Used by route handlers via FastAPI's dependency injection system and
       by repositories through the session they are constructed with.
When:  Engine is created at module import; sessions are created per-request.

Connection Pooling Strategy (PostgreSQL):
    pool_size:         Persistent connections for normal load
    max_overflow:      Temporary connections for traffic spikes
    pool_pre_ping:     Validates connections before use (catches stale connections)
    pool_recycle=3600: Recycles connections every hour

SQLite (local development and tests):
    No pool sizing. In-memory URLs share one connection through StaticPool.
    pysqlite's implicit BEGIN handling is replaced with an explicit BEGIN so
    SAVEPOINT (begin_nested) behaves the same as on PostgreSQL.
"""

import logging
from typing import Any, AsyncGenerator, Awaitable, Callable, TypeVar

from sqlalchemy import event, text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from gateway.config import settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


# ── Engine Construction ───────────────────────────────────────────────────
def _enable_sqlite_savepoints(engine: AsyncEngine) -> None:
    """Emit BEGIN ourselves so SAVEPOINT / ROLLBACK TO work on SQLite."""

    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")


def build_engine(url: str, echo: bool = False) -> AsyncEngine:
    """
    Create an async engine configured for the URL's backend.

    Args:
        url: SQLAlchemy async URL (postgresql+asyncpg://..., sqlite+aiosqlite://...)
        echo: Log every SQL statement (development only)

    Returns:
        AsyncEngine ready to hand to async_sessionmaker.
    """
    sa_url = make_url(url)

    if sa_url.get_backend_name() == "sqlite":
        options: dict[str, Any] = {"echo": echo}
        if sa_url.database in (None, "", ":memory:"):
            options["poolclass"] = StaticPool
        sqlite_engine = create_async_engine(url, **options)
        _enable_sqlite_savepoints(sqlite_engine)
        return sqlite_engine

    return create_async_engine(
        url,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_pre_ping=settings.db_pool_pre_ping,
        pool_recycle=3600,
        echo=echo,
    )


engine = build_engine(settings.sqlalchemy_url, echo=settings.log_level == "DEBUG")

# ── Session Factory ───────────────────────────────────────────────────────
# expire_on_commit=False: attributes stay readable after commit
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares a single metadata object that Alembic reads for migrations.
    """
    pass


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the factory
        2. Yields it to the route handler (the handler performs queries)
        3. On success: commits the transaction
        4. On error: rolls back the transaction
        5. Always: closes the session (returns connection to pool)

    Example usage in a route:
        @router.get("/clients")
        async def list_clients(db: AsyncSession = Depends(get_db_session)):
            ...

    Raises:
        Any database exceptions are propagated to the global error handler.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── Transactions ──────────────────────────────────────────────────────────
async def run_in_transaction(
    session: AsyncSession,
    unit_of_work: Callable[[AsyncSession], Awaitable[T]],
) -> T:
    """
    Run `unit_of_work` as one atomic unit on `session`.

    Opens a transaction when none is in progress (committed on success),
    otherwise a SAVEPOINT inside the current one. Either way a raised
    exception rolls back everything the unit wrote and propagates unchanged.
    """
    if session.in_transaction():
        async with session.begin_nested():
            return await unit_of_work(session)
    async with session.begin():
        return await unit_of_work(session)


# ── Health Probe ──────────────────────────────────────────────────────────
def get_engine() -> AsyncEngine:
    """FastAPI dependency returning the shared engine (overridden in tests)."""
    return engine


async def ping(bind: AsyncEngine) -> bool:
    """
    Liveness probe: SELECT 1 on a fresh pooled connection.

    Returns False instead of raising; the failure is logged here and the
    caller decides how to report it.
    """
    try:
        async with bind.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.warning("Database ping failed: %s", str(e))
        return False
    return True


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def dispose_engine() -> None:
    """Close all pooled connections. Called from the application lifespan."""
    await engine.dispose()
