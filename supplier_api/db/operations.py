# supplier_api/db/operations.py
"""Common async session helpers."""

from sqlalchemy.ext.asyncio import AsyncSession


async def commit_async(session: AsyncSession) -> None:
    """Commit and rollback on failure."""
    try:
        await session.commit()
    except Exception:
        await rollback_async(session)
        raise


async def rollback_async(session: AsyncSession) -> None:
    if session.in_transaction():
        await session.rollback()
