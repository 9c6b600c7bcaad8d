"""
Delivery Person Model.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, DateTime, Float, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import AccountMixin, AuditMixin, Base, IdType

if TYPE_CHECKING:
    from .order import Order


class DeliveryPerson(AccountMixin, AuditMixin, Base):
    """
    Courier account. Only active, available couriers with a known
    location are considered for assignment.
    """

    __tablename__ = "delivery_person"

    id: Mapped[int] = mapped_column(IdType, primary_key=True)
    phone: Mapped[str] = mapped_column(Text, nullable=False, unique=True, index=True)
    pin_hash: Mapped[Optional[str]] = mapped_column(Text)

    vehicle_type: Mapped[str] = mapped_column(Text, default="Bike", nullable=False)
    vehicle_number: Mapped[str] = mapped_column(Text, nullable=False)

    is_available: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    latitude: Mapped[Optional[float]] = mapped_column(Float)
    longitude: Mapped[Optional[float]] = mapped_column(Float)
    location_updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    # Percentage of each delivered order total credited to the courier
    commission: Mapped[float] = mapped_column(Float, default=10.0, nullable=False)
    total_earnings: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    total_deliveries: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    completed_deliveries: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    orders: Mapped[list["Order"]] = relationship(back_populates="delivery_person")

    __table_args__ = (
        Index("ix_delivery_person_dispatchable", "is_active", "is_available"),
        Index("ix_delivery_person_location", "latitude", "longitude"),
    )

    @property
    def has_location(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    def credit_delivery(self, order_total: float) -> float:
        """Credit commission for one delivered order; returns the amount."""
        earned = round(order_total * self.commission / 100, 2)
        self.total_earnings = round(self.total_earnings + earned, 2)
        self.total_deliveries += 1
        self.completed_deliveries += 1
        return earned

    def __repr__(self) -> str:
        return f"<DeliveryPerson(id={self.id}, available={self.is_available})>"
