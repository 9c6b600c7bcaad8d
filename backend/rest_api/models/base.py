"""
Base class and mixins for all SQLAlchemy ORM models.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import BigInteger, Boolean, DateTime, Integer, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

# BIGINT in PostgreSQL; INTEGER in SQLite so primary keys autoincrement
IdType = BigInteger().with_variant(Integer(), "sqlite")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class AuditMixin:
    """
    Mixin providing soft delete and audit timestamps.

    Fields added:
    - is_active: Soft delete flag (False = deleted/inactive, True = active)
    - created_at, updated_at, deleted_at: Audit timestamps
    """

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False, index=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False, index=True
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), onupdate=_utcnow, nullable=True
    )
    deleted_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    def soft_delete(self) -> None:
        self.is_active = False
        self.deleted_at = _utcnow()

    def __repr__(self) -> str:
        class_name = self.__class__.__name__
        id_val = getattr(self, "id", None)
        active = "active" if self.is_active else "deleted"
        return f"<{class_name}(id={id_val}, {active})>"


class AccountMixin:
    """
    Credential and challenge fields shared by every account type
    (customer, vendor, delivery person, admin).

    Password-reset and email-verification codes live on the account row,
    each with its own expiry.
    """

    name: Mapped[str] = mapped_column(Text, nullable=False)
    email: Mapped[str] = mapped_column(Text, nullable=False, unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)
    last_login: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    email_verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    verification_otp_code: Mapped[Optional[str]] = mapped_column(Text)
    verification_otp_expires_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    reset_otp_code: Mapped[Optional[str]] = mapped_column(Text)
    reset_otp_expires_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    def touch_login(self) -> None:
        self.last_login = _utcnow()
