# supplier_api/models/user.py
from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Table, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from supplier_api.db.session import Base
from supplier_api.db.types import GUID


user_roles = Table(
    "user_roles",
    Base.metadata,
    Column("user_id", GUID(), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("role_id", GUID(), ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
)


class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(GUID(), primary_key=True, default=uuid.uuid4, nullable=False)

    email: Mapped[str] = mapped_column(String(256), nullable=False)
    # Lookups go through the upper-cased copy so they are case-insensitive.
    normalized_email: Mapped[str] = mapped_column(String(256), unique=True, index=True, nullable=False)
    hashed_password: Mapped[str] = mapped_column(String, nullable=False)
    email_confirmed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Lockout
    access_failed_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    lockout_enabled: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    lockout_end: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    claims: Mapped[list["UserClaim"]] = relationship(
        back_populates="user", cascade="all, delete-orphan", lazy="selectin"
    )
    roles: Mapped[list["Role"]] = relationship(secondary=user_roles, lazy="selectin")


class UserClaim(Base):
    __tablename__ = "user_claims"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[uuid.UUID] = mapped_column(GUID(), ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    claim_type: Mapped[str] = mapped_column(String(256), nullable=False)
    claim_value: Mapped[str] = mapped_column(String(256), nullable=False, default="")

    user: Mapped[User] = relationship(back_populates="claims")


class Role(Base):
    __tablename__ = "roles"

    id: Mapped[uuid.UUID] = mapped_column(GUID(), primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(256), nullable=False)

    __table_args__ = (UniqueConstraint("name", name="uq_roles_name"),)
