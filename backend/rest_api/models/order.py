"""
Order Models: Order, OrderItem.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, CheckConstraint, DateTime, Float, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shared.config.constants import OrderStatus, PaymentMethod

from .base import AuditMixin, Base, IdType

if TYPE_CHECKING:
    from .customer import Customer
    from .delivery import DeliveryPerson
    from .restaurant import Restaurant


class Order(AuditMixin, Base):
    """
    A customer order placed against one restaurant.
    Inherits: is_active, created_at, updated_at, deleted_at from AuditMixin.

    Lifecycle: Order Placed -> Accepted -> Preparing -> Out for Delivery -> Delivered,
    with Cancelled reachable from any non-terminal state.

    Customer contact fields are a snapshot taken at placement time.
    """

    __tablename__ = "customer_order"

    id: Mapped[int] = mapped_column(IdType, primary_key=True)
    order_number: Mapped[str] = mapped_column(Text, nullable=False, unique=True, index=True)
    restaurant_id: Mapped[int] = mapped_column(
        IdType, ForeignKey("restaurant.id"), nullable=False, index=True
    )
    customer_id: Mapped[Optional[int]] = mapped_column(
        IdType, ForeignKey("customer.id"), index=True
    )

    # Customer snapshot
    customer_name: Mapped[str] = mapped_column(Text, nullable=False)
    customer_phone: Mapped[str] = mapped_column(Text, nullable=False)
    customer_address: Mapped[str] = mapped_column(Text, nullable=False)
    customer_email: Mapped[Optional[str]] = mapped_column(Text, index=True)

    subtotal: Mapped[float] = mapped_column(Float, nullable=False)
    delivery_fee: Mapped[float] = mapped_column(Float, default=20.0, nullable=False)
    total_amount: Mapped[float] = mapped_column(Float, nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text)
    payment_method: Mapped[str] = mapped_column(
        Text, default=PaymentMethod.CASH_ON_DELIVERY, nullable=False
    )

    status: Mapped[str] = mapped_column(
        Text, default=OrderStatus.PLACED, nullable=False, index=True
    )
    estimated_delivery_time: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    accepted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    delivered_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    cancelled_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    # Delivery confirmation code
    otp_code: Mapped[Optional[str]] = mapped_column(Text)
    otp_expires_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    otp_verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    delivery_person_id: Mapped[Optional[int]] = mapped_column(
        IdType, ForeignKey("delivery_person.id"), index=True
    )
    assigned_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    rating: Mapped[Optional[int]] = mapped_column(Integer)
    review: Mapped[Optional[str]] = mapped_column(Text)

    # Relationships
    restaurant: Mapped["Restaurant"] = relationship(back_populates="orders")
    customer: Mapped[Optional["Customer"]] = relationship(back_populates="orders")
    delivery_person: Mapped[Optional["DeliveryPerson"]] = relationship(back_populates="orders")
    items: Mapped[list["OrderItem"]] = relationship(
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.id",
    )

    __table_args__ = (
        CheckConstraint("subtotal >= 0", name="chk_order_subtotal_non_negative"),
        CheckConstraint(
            "rating IS NULL OR (rating >= 1 AND rating <= 5)", name="chk_order_rating_range"
        ),
        # Sweep query: Out for Delivery orders without a courier
        Index("ix_order_status_delivery_person", "status", "delivery_person_id"),
        Index("ix_order_restaurant_status", "restaurant_id", "status"),
    )

    @property
    def is_terminal(self) -> bool:
        return self.status in OrderStatus.TERMINAL

    @property
    def restaurant_name(self) -> str | None:
        return self.restaurant.name if self.restaurant else None

    def __repr__(self) -> str:
        return f"<Order(id={self.id}, number='{self.order_number}', status='{self.status}')>"


class OrderItem(Base):
    """
    A line on an order. Name and price are copied from the menu so later
    menu edits never change what was ordered.
    """

    __tablename__ = "order_item"

    id: Mapped[int] = mapped_column(IdType, primary_key=True)
    order_id: Mapped[int] = mapped_column(
        IdType, ForeignKey("customer_order.id", ondelete="CASCADE"), nullable=False, index=True
    )
    menu_item_id: Mapped[Optional[int]] = mapped_column(IdType)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    price: Mapped[float] = mapped_column(Float, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    total_price: Mapped[float] = mapped_column(Float, nullable=False)

    order: Mapped["Order"] = relationship(back_populates="items")

    __table_args__ = (
        CheckConstraint("quantity >= 1", name="chk_order_item_quantity_positive"),
        CheckConstraint("price >= 0", name="chk_order_item_price_non_negative"),
    )
