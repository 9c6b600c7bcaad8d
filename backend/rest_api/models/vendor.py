"""
Vendor Model.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from sqlalchemy import Float, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import AccountMixin, AuditMixin, Base, IdType

if TYPE_CHECKING:
    from .restaurant import Restaurant


class Vendor(AccountMixin, AuditMixin, Base):
    """
    Account that owns exactly one restaurant.

    The link lives on Restaurant.vendor_id only, so a vendor and its
    restaurant are flushed together in one transaction at registration.
    """

    __tablename__ = "vendor"

    id: Mapped[int] = mapped_column(IdType, primary_key=True)
    phone: Mapped[str] = mapped_column(Text, nullable=False, unique=True, index=True)
    pin_hash: Mapped[Optional[str]] = mapped_column(Text)

    street: Mapped[Optional[str]] = mapped_column(Text)
    city: Mapped[Optional[str]] = mapped_column(Text)
    state: Mapped[Optional[str]] = mapped_column(Text)
    pincode: Mapped[Optional[str]] = mapped_column(Text)

    # Percentage of order totals retained by the platform
    commission: Mapped[float] = mapped_column(Float, default=10.0, nullable=False)

    restaurant: Mapped[Optional["Restaurant"]] = relationship(
        back_populates="vendor", uselist=False
    )

    def __repr__(self) -> str:
        return f"<Vendor(id={self.id}, email='{self.email}')>"
