"""Async engine and session factory for the ledger tables."""

import os
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, AsyncEngine, create_async_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import NullPool, StaticPool

from .exceptions import StoreNotConfigured


engine: Optional[AsyncEngine] = None
AsyncSessionLocal: Optional[sessionmaker] = None
Base = declarative_base()


def _async_url(database_url: str) -> str:
    if database_url.startswith("postgresql://"):
        return database_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return database_url


def get_engine() -> AsyncEngine:
    """Return the ledger engine, creating it from ``DATABASE_URL`` on first use.

    Nothing is connected at import time, so tests can point ``DATABASE_URL``
    somewhere else before the first request. Without ``DATABASE_URL`` the
    ledger cannot be read or written and :class:`StoreNotConfigured` is raised
    (rendered as a 503 by the API).
    """

    global engine, AsyncSessionLocal

    if engine is None:
        database_url = os.getenv("DATABASE_URL")
        if not database_url:
            raise StoreNotConfigured("DATABASE_URL environment variable is required")
        database_url = _async_url(database_url)

        engine_kwargs = {"echo": False}
        if database_url.startswith("sqlite+aiosqlite://"):
            # An in-memory database lives only as long as its one connection.
            engine_kwargs["poolclass"] = StaticPool if ":memory:" in database_url else NullPool
        else:
            engine_kwargs["pool_pre_ping"] = True

        engine = create_async_engine(database_url, **engine_kwargs)
        AsyncSessionLocal = sessionmaker(
            engine, class_=AsyncSession, expire_on_commit=False
        )

    return engine


async def get_session() -> AsyncSession:
    """FastAPI dependency yielding one session per request."""

    if AsyncSessionLocal is None:
        get_engine()

    assert AsyncSessionLocal is not None  # for type checkers
    async with AsyncSessionLocal() as session:
        yield session
