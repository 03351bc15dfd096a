"""
Async engine and session wiring.

The API gets a request-scoped session from get_async_db. The analysis
pipeline builds its own factory with get_async_session_factory and opens
a fresh session per step, so one failed step never poisons the next.

Dependencies: sqlalchemy, asyncpg, filetable.configs
System role: Database connection lifecycle management
"""

from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from filetable.configs import get_settings


def get_async_engine() -> AsyncEngine:
    """Pooled asyncpg engine; pre-ping drops connections the server closed."""
    db = get_settings().database
    return create_async_engine(
        db.async_database_url,
        echo=db.echo_sql,
        pool_size=db.pool_size,
        max_overflow=db.max_overflow,
        pool_timeout=db.pool_timeout,
        pool_pre_ping=True,
    )


def get_async_session_factory(engine: AsyncEngine | None = None) -> async_sessionmaker:
    """
    Session factory bound to engine, or to a new pooled engine when None.

    Objects stay readable after commit; flushing is explicit.
    """
    return async_sessionmaker(
        bind=engine or get_async_engine(),
        class_=AsyncSession,
        autoflush=False,
        expire_on_commit=False,
    )


_session_factory: async_sessionmaker | None = None


async def get_async_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding one session per request."""
    global _session_factory
    if _session_factory is None:
        _session_factory = get_async_session_factory()
    async with _session_factory() as session:
        yield session
