# supplier_api/api/routers/suppliers.py
import uuid

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from supplier_api.api.deps import get_current_principal, require_policy
from supplier_api.db.session_async import get_async_db
from supplier_api.schemas.auth import TokenPayload
from supplier_api.schemas.problem import ValidationProblem
from supplier_api.schemas.supplier import SupplierPayload, SupplierRead
from supplier_api.services.exceptions import (
    DomainValidationError,
    PersistenceError,
    ResourceNotFoundError,
)
from supplier_api.services import supplier_store
from supplier_api.services.validation import SUPPLIER_RULES, validate

router = APIRouter(prefix="/supplier", tags=["suppliers"])


def _parse_id(supplier_id: str) -> uuid.UUID:
    try:
        return uuid.UUID(supplier_id)
    except ValueError as exc:
        raise ResourceNotFoundError("Supplier not found") from exc


def _ensure_valid(payload: SupplierPayload) -> None:
    result = validate(payload, SUPPLIER_RULES)
    if not result.ok:
        raise DomainValidationError(result.errors)


@router.get("", response_model=list[SupplierRead], name="list_suppliers")
async def list_suppliers(db: AsyncSession = Depends(get_async_db)):
    return await supplier_store.list_suppliers(db)


@router.get(
    "/{supplier_id}",
    response_model=SupplierRead,
    name="get_supplier",
    responses={404: {"description": "Supplier not found"}},
)
async def get_supplier(supplier_id: str, db: AsyncSession = Depends(get_async_db)):
    supplier = await supplier_store.get_supplier(db, _parse_id(supplier_id))
    if supplier is None:
        raise ResourceNotFoundError("Supplier not found")
    return supplier


@router.post(
    "",
    response_model=SupplierRead,
    status_code=status.HTTP_201_CREATED,
    name="create_supplier",
    responses={400: {"model": ValidationProblem}},
)
async def create_supplier(
    payload: SupplierPayload,
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_async_db),
    _: TokenPayload = Depends(get_current_principal),
):
    _ensure_valid(payload)

    rows, supplier = await supplier_store.insert_supplier(db, payload)
    if rows <= 0:
        raise PersistenceError()

    response.headers["Location"] = str(request.url_for("get_supplier", supplier_id=str(supplier.id)))
    return supplier


@router.put(
    "/{supplier_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    name="update_supplier",
    responses={400: {"model": ValidationProblem}, 404: {"description": "Supplier not found"}},
)
async def update_supplier(
    supplier_id: str,
    payload: SupplierPayload,
    db: AsyncSession = Depends(get_async_db),
    _: TokenPayload = Depends(get_current_principal),
):
    key = _parse_id(supplier_id)
    # Existence check and overwrite are separate statements; a concurrent
    # delete in between surfaces as a zero-row update below.
    if not await supplier_store.supplier_exists(db, key):
        raise ResourceNotFoundError("Supplier not found")

    _ensure_valid(payload)
    if payload.id is not None and payload.id != key:
        raise DomainValidationError({"id": ["The id field does not match the route id."]})

    rows = await supplier_store.update_supplier(db, key, payload)
    if rows <= 0:
        raise PersistenceError()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete(
    "/{supplier_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    name="delete_supplier",
    responses={404: {"description": "Supplier not found"}},
)
async def delete_supplier(
    supplier_id: str,
    db: AsyncSession = Depends(get_async_db),
    _: TokenPayload = Depends(require_policy("DeleteSupplier")),
):
    key = _parse_id(supplier_id)
    if await supplier_store.get_supplier(db, key) is None:
        raise ResourceNotFoundError("Supplier not found")

    rows = await supplier_store.delete_supplier(db, key)
    if rows <= 0:
        raise PersistenceError()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
