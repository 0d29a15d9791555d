import uuid
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Boolean

from supplier_api.db.session import Base
from supplier_api.db.types import GUID


class Supplier(Base):
    __tablename__ = "suppliers"

    id: Mapped[uuid.UUID] = mapped_column(GUID(), primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    document: Mapped[str] = mapped_column(String(14), nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    def __repr__(self) -> str:
        return f"<Supplier {self.document} {self.name}>"
