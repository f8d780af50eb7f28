"""
Tuiter Backend — Database Engine & Session Management
=======================================================

What:  Async SQLAlchemy engine, session factory, declarative base and the
       transactional session scope every store call runs inside.
How:   The engine owns the connection pool. Stores receive the session
       factory once at startup and open one short-lived session per call,
       so concurrent store calls run on separate pooled connections.
Who:   Used by the stores package, the app factory and Alembic.
When:  Engine is created at module import; sessions are created per store call.

Connection Pooling:
    pool_size=20:      Persistent connections for normal load
    max_overflow=10:   Temporary connections for traffic spikes (total max = 30)
    pool_pre_ping:     Validates connections before use
    pool_recycle=3600: Recycles connections every hour

    The annotation fan-out issues up to 3 x N lookups at once, so a page of
    tuits can briefly hold every pooled connection. Lookups beyond the pool
    wait up to pool_timeout (30s by default) for a free connection, then
    raise sqlalchemy.exc.TimeoutError, which the annotator reports as
    AnnotationError.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from tuiter.config import settings


def build_engine(url: str) -> AsyncEngine:
    """
    Create an async engine for ``url``.

    SQLite (used by the test suite) gets the dialect's default pool; the
    queue-pool sizing options only apply to server databases.
    """
    kwargs: Dict[str, Any] = {"echo": settings.log_level == "DEBUG"}
    if not url.startswith("sqlite"):
        kwargs.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
        )
    return create_async_engine(url, **kwargs)


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # expire_on_commit=False: records stay readable after the session closes
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)


# ── Process-wide engine ───────────────────────────────────────────────────
engine = build_engine(settings.database_url)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Registers every model with one shared metadata object, which both
    ``init_models`` and Alembic read.
    """
    pass


@asynccontextmanager
async def session_scope(
    factory: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    """
    Provide a transactional session for a single store operation.

    How it works:
        1. Creates a new session from the factory
        2. Yields it to the caller (the store performs queries)
        3. On success: commits the transaction
        4. On error: rolls back and re-raises
        5. Always: closes the session (returns connection to pool)

    Example:
        async with session_scope(factory) as session:
            session.add(Like(user_id=uid, tuit_id=tid))
    """
    session = factory()
    try:
        yield session
        await session.commit()
    except BaseException:
        # BaseException so a cancelled fan-out lookup also releases its transaction
        await session.rollback()
        raise
    finally:
        await session.close()


async def init_models(bind: AsyncEngine) -> None:
    """Create any missing tables for the registered models."""
    # Model modules must be imported so their tables are on Base.metadata
    from tuiter import models  # noqa: F401

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
