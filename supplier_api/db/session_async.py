# supplier_api/db/session_async.py
"""Async SQLAlchemy session utilities."""

from collections.abc import AsyncIterator
from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from supplier_api.core.config import settings
from supplier_api.db.session import Base

engine_kwargs: dict[str, Any] = {"pool_pre_ping": True}
# aiosqlite connections are bound to the loop that opened them.
if settings.ASYNC_DATABASE_URL.startswith("sqlite"):
    engine_kwargs = {"poolclass": NullPool}

async_engine: AsyncEngine = create_async_engine(settings.ASYNC_DATABASE_URL, **engine_kwargs)

AsyncSessionLocal = async_sessionmaker(
    bind=async_engine,
    expire_on_commit=False,
    autoflush=False,
)


async def get_async_db() -> AsyncIterator[AsyncSession]:
    """FastAPI dependency that yields an AsyncSession."""
    async with AsyncSessionLocal() as session:
        yield session


async def init_models() -> None:
    """Create every mapped table that does not exist yet."""
    import supplier_api.models.supplier  # noqa: F401
    import supplier_api.models.user  # noqa: F401

    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
