"""Persistence over the ``suppliers`` table.

Every mutation commits its own transaction and reports the number of rows it
wrote; 0 means the write did not happen.
"""

from __future__ import annotations

import uuid
from collections.abc import Sequence

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from supplier_api.core.logging import get_logger
from supplier_api.core.metrics import record_supplier_write
from supplier_api.db.operations import commit_async, rollback_async
from supplier_api.models.supplier import Supplier
from supplier_api.schemas.supplier import SupplierPayload

logger = get_logger("supplier_api.suppliers")


async def list_suppliers(db: AsyncSession) -> Sequence[Supplier]:
    result = await db.execute(select(Supplier).order_by(Supplier.name.asc()))
    return result.scalars().all()


async def get_supplier(db: AsyncSession, supplier_id: uuid.UUID) -> Supplier | None:
    return await db.get(Supplier, supplier_id)


async def supplier_exists(db: AsyncSession, supplier_id: uuid.UUID) -> bool:
    # Selects the key column only, so nothing enters the identity map.
    stmt = select(Supplier.id).where(Supplier.id == supplier_id).limit(1)
    return (await db.execute(stmt)).scalar_one_or_none() is not None


async def insert_supplier(db: AsyncSession, record: SupplierPayload) -> tuple[int, Supplier]:
    supplier = Supplier(
        id=record.id or uuid.uuid4(),
        name=record.name,
        document=record.document,
        active=record.active,
    )
    db.add(supplier)
    try:
        await commit_async(db)
    except IntegrityError:
        logger.warning("Supplier insert rejected by the database", extra={"supplier_id": str(supplier.id)})
        record_supplier_write("insert", 0)
        return 0, supplier
    logger.info("Supplier created", extra={"supplier_id": str(supplier.id)})
    record_supplier_write("insert", 1)
    return 1, supplier


async def update_supplier(db: AsyncSession, supplier_id: uuid.UUID, record: SupplierPayload) -> int:
    """Overwrite every mutable column of ``supplier_id``; no existence check."""
    stmt = (
        update(Supplier)
        .where(Supplier.id == supplier_id)
        .values(name=record.name, document=record.document, active=record.active)
        .execution_options(synchronize_session=False)
    )
    try:
        result = await db.execute(stmt)
        await commit_async(db)
    except IntegrityError:
        await rollback_async(db)
        record_supplier_write("update", 0)
        return 0
    rows = result.rowcount or 0
    logger.info("Supplier updated", extra={"supplier_id": str(supplier_id), "rows": rows})
    record_supplier_write("update", rows)
    return rows


async def delete_supplier(db: AsyncSession, supplier_id: uuid.UUID) -> int:
    supplier = await get_supplier(db, supplier_id)
    if supplier is None:
        return 0
    await db.delete(supplier)
    await commit_async(db)
    logger.info("Supplier deleted", extra={"supplier_id": str(supplier_id)})
    record_supplier_write("delete", 1)
    return 1
