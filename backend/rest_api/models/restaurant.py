"""
Restaurant Models: Restaurant, MenuItem.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, CheckConstraint, Float, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import AuditMixin, Base, IdType

if TYPE_CHECKING:
    from .vendor import Vendor
    from .order import Order


class Restaurant(AuditMixin, Base):
    """
    A restaurant owned by exactly one vendor.
    Menu items are owned by the restaurant and kept in insertion order.
    Inherits: is_active, created_at, updated_at, deleted_at from AuditMixin.

    rating is a running mean updated per rating event, never recomputed.
    """

    __tablename__ = "restaurant"

    id: Mapped[int] = mapped_column(IdType, primary_key=True)
    vendor_id: Mapped[Optional[int]] = mapped_column(
        IdType, ForeignKey("vendor.id"), unique=True, index=True
    )
    name: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    cuisine: Mapped[str] = mapped_column(Text, default="Mixed", nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    image: Mapped[Optional[str]] = mapped_column(Text)

    # Address
    street: Mapped[Optional[str]] = mapped_column(Text)
    city: Mapped[Optional[str]] = mapped_column(Text)
    state: Mapped[Optional[str]] = mapped_column(Text)
    pincode: Mapped[Optional[str]] = mapped_column(Text)
    full_address: Mapped[Optional[str]] = mapped_column(Text)

    # Contact
    phone: Mapped[Optional[str]] = mapped_column(Text)
    email: Mapped[Optional[str]] = mapped_column(Text)

    rating: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    total_ratings: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Minutes
    delivery_time_min: Mapped[int] = mapped_column(Integer, default=30, nullable=False)
    delivery_time_max: Mapped[int] = mapped_column(Integer, default=45, nullable=False)
    min_order: Mapped[float] = mapped_column(Float, default=100.0, nullable=False)
    delivery_fee: Mapped[float] = mapped_column(Float, default=20.0, nullable=False)

    is_open: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False, index=True)

    latitude: Mapped[Optional[float]] = mapped_column(Float)
    longitude: Mapped[Optional[float]] = mapped_column(Float)

    # Relationships
    vendor: Mapped[Optional["Vendor"]] = relationship(back_populates="restaurant")
    menu_items: Mapped[list["MenuItem"]] = relationship(
        back_populates="restaurant",
        cascade="all, delete-orphan",
        order_by="MenuItem.id",
    )
    orders: Mapped[list["Order"]] = relationship(back_populates="restaurant")

    __table_args__ = (
        CheckConstraint("rating >= 0 AND rating <= 5", name="chk_restaurant_rating_range"),
        CheckConstraint("min_order >= 0", name="chk_restaurant_min_order_non_negative"),
        CheckConstraint("delivery_fee >= 0", name="chk_restaurant_delivery_fee_non_negative"),
        Index("ix_restaurant_open_active", "is_open", "is_active"),
    )

    @property
    def has_location(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    def compose_full_address(self) -> None:
        """Fill full_address when every address part is present."""
        parts = [self.street, self.city, self.state, self.pincode]
        if all(parts):
            self.full_address = f"{self.street}, {self.city}, {self.state} - {self.pincode}"

    def apply_rating(self, rating: int) -> None:
        """Fold one rating into the running mean."""
        self.rating = (self.rating * self.total_ratings + rating) / (self.total_ratings + 1)
        self.total_ratings += 1

    def __repr__(self) -> str:
        return f"<Restaurant(id={self.id}, name='{self.name}', open={self.is_open})>"


class MenuItem(AuditMixin, Base):
    """
    A dish on a restaurant menu. Has no lifecycle outside its restaurant.
    Inherits: is_active, created_at, updated_at, deleted_at from AuditMixin.
    """

    __tablename__ = "menu_item"

    id: Mapped[int] = mapped_column(IdType, primary_key=True)
    restaurant_id: Mapped[int] = mapped_column(
        IdType, ForeignKey("restaurant.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    price: Mapped[float] = mapped_column(Float, nullable=False)
    category: Mapped[str] = mapped_column(Text, nullable=False)
    image: Mapped[Optional[str]] = mapped_column(Text)
    is_veg: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    is_available: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    preparation_time: Mapped[int] = mapped_column(Integer, default=15, nullable=False)

    restaurant: Mapped["Restaurant"] = relationship(back_populates="menu_items")

    __table_args__ = (
        CheckConstraint("price >= 0", name="chk_menu_item_price_non_negative"),
    )

    def __repr__(self) -> str:
        return f"<MenuItem(id={self.id}, name='{self.name}', price={self.price})>"
