from pydantic import BaseModel
from pydantic import ConfigDict
from uuid import UUID
from typing import Optional


class SupplierPayload(BaseModel):
    """Inbound supplier body.

    Field bounds are enforced by ``SUPPLIER_RULES`` so that missing and
    over-long values come back as one validation problem.
    """
    id: Optional[UUID] = None
    name: Optional[str] = None
    document: Optional[str] = None
    active: bool = False


class SupplierRead(BaseModel):
    id: UUID
    name: str
    document: str
    active: bool

    model_config = ConfigDict(from_attributes=True)
