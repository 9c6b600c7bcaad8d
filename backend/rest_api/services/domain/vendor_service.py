"""
Vendor Service.

Everything a vendor manages: its profile, its restaurant settings,
its menu and the order/revenue dashboard. Callers check that the
session token belongs to the vendor before calling.
"""

from datetime import datetime, timedelta

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from rest_api.models import MenuItem, Order, Restaurant, Vendor
from shared.config.constants import OrderStatus
from shared.config.logging import get_logger
from shared.infrastructure.db import safe_commit
from shared.utils.exceptions import DuplicateEntityError, NotFoundError, ValidationError
from shared.utils.otp import utcnow
from shared.utils.schemas import (
    MenuItemCreate,
    MenuItemOutput,
    MenuItemUpdate,
    RestaurantOutput,
    RestaurantSettingsUpdate,
    VendorDashboardOutput,
    VendorProfileOutput,
    VendorProfileUpdate,
)

logger = get_logger(__name__)

PENDING_STATUSES = [OrderStatus.PLACED, OrderStatus.ACCEPTED, OrderStatus.PREPARING]


class VendorService:
    """Vendor-owned profile, restaurant and menu operations."""

    def __init__(self, db: Session):
        self._db = db

    # =========================================================================
    # Lookups
    # =========================================================================

    def get_vendor(self, vendor_id: int) -> Vendor:
        vendor = self._db.scalar(
            select(Vendor)
            .options(selectinload(Vendor.restaurant))
            .where(Vendor.id == vendor_id, Vendor.is_active.is_(True))
        )
        if vendor is None:
            raise NotFoundError("Vendor", vendor_id)
        return vendor

    def get_restaurant(self, vendor_id: int) -> Restaurant:
        restaurant = self._db.scalar(
            select(Restaurant)
            .options(selectinload(Restaurant.menu_items))
            .where(Restaurant.vendor_id == vendor_id)
        )
        if restaurant is None:
            raise NotFoundError("Restaurant", vendor_id=vendor_id)
        return restaurant

    def _get_menu_item(self, restaurant: Restaurant, menu_item_id: int) -> MenuItem:
        for item in restaurant.menu_items:
            if item.id == menu_item_id:
                return item
        raise NotFoundError("Menu item", menu_item_id, restaurant_id=restaurant.id)

    # =========================================================================
    # Profile
    # =========================================================================

    def get_profile(self, vendor_id: int) -> VendorProfileOutput:
        return VendorProfileOutput.model_validate(self.get_vendor(vendor_id), from_attributes=True)

    def update_profile(self, vendor_id: int, body: VendorProfileUpdate) -> VendorProfileOutput:
        vendor = self.get_vendor(vendor_id)
        for field, value in body.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(vendor, field, value)

        try:
            safe_commit(self._db)
        except IntegrityError:
            raise DuplicateEntityError("Vendor", identifier=body.phone, detail="Phone number already in use")
        self._db.refresh(vendor)

        logger.info("Vendor profile updated", vendor_id=vendor.id)
        return VendorProfileOutput.model_validate(vendor, from_attributes=True)

    # =========================================================================
    # Restaurant settings
    # =========================================================================

    def update_restaurant(self, vendor_id: int, body: RestaurantSettingsUpdate) -> RestaurantOutput:
        """Partial update: open flag, location, pricing, delivery window, address."""
        restaurant = self.get_restaurant(vendor_id)
        changes = {k: v for k, v in body.model_dump(exclude_unset=True).items() if v is not None}

        # Coordinates are meaningful only as a pair
        if ("latitude" in changes) != ("longitude" in changes):
            raise ValidationError("latitude and longitude must be updated together")

        time_min = changes.get("delivery_time_min", restaurant.delivery_time_min)
        time_max = changes.get("delivery_time_max", restaurant.delivery_time_max)
        if time_min > time_max:
            raise ValidationError("delivery_time_min cannot exceed delivery_time_max")

        for field, value in changes.items():
            setattr(restaurant, field, value)
        if changes.keys() & {"street", "city", "state", "pincode"}:
            restaurant.compose_full_address()

        safe_commit(self._db)
        self._db.refresh(restaurant)

        logger.info("Restaurant settings updated", restaurant_id=restaurant.id, fields=sorted(changes))
        return RestaurantOutput.model_validate(restaurant, from_attributes=True)

    # =========================================================================
    # Menu
    # =========================================================================

    def list_menu(self, vendor_id: int) -> tuple[Restaurant, list[MenuItemOutput]]:
        """The full menu, unavailable items included."""
        restaurant = self.get_restaurant(vendor_id)
        items = [
            MenuItemOutput.model_validate(item, from_attributes=True)
            for item in restaurant.menu_items
            if item.is_active
        ]
        return restaurant, items

    def add_menu_item(self, vendor_id: int, body: MenuItemCreate) -> MenuItemOutput:
        restaurant = self.get_restaurant(vendor_id)
        item = MenuItem(**body.model_dump())
        restaurant.menu_items.append(item)

        safe_commit(self._db)
        self._db.refresh(item)

        logger.info("Menu item added", restaurant_id=restaurant.id, menu_item_id=item.id)
        return MenuItemOutput.model_validate(item, from_attributes=True)

    def update_menu_item(self, vendor_id: int, menu_item_id: int, body: MenuItemUpdate) -> MenuItemOutput:
        restaurant = self.get_restaurant(vendor_id)
        item = self._get_menu_item(restaurant, menu_item_id)

        for field, value in body.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(item, field, value)

        safe_commit(self._db)
        self._db.refresh(item)

        logger.info("Menu item updated", restaurant_id=restaurant.id, menu_item_id=item.id)
        return MenuItemOutput.model_validate(item, from_attributes=True)

    def delete_menu_item(self, vendor_id: int, menu_item_id: int) -> None:
        """Remove the item from the menu. Past orders keep their copied lines."""
        restaurant = self.get_restaurant(vendor_id)
        item = self._get_menu_item(restaurant, menu_item_id)
        restaurant.menu_items.remove(item)
        safe_commit(self._db)

        logger.info("Menu item deleted", restaurant_id=restaurant.id, menu_item_id=menu_item_id)

    # =========================================================================
    # Dashboard
    # =========================================================================

    def get_dashboard(self, vendor_id: int) -> VendorDashboardOutput:
        """
        Order counts and revenue. Revenue excludes cancelled orders;
        windows are today (UTC), the last 7 days and the last 30 days.
        """
        restaurant = self.get_restaurant(vendor_id)
        now = utcnow()
        today = now.replace(hour=0, minute=0, second=0, microsecond=0)

        counts = dict(
            self._db.execute(
                select(Order.status, func.count(Order.id))
                .where(Order.restaurant_id == restaurant.id, Order.is_active.is_(True))
                .group_by(Order.status)
            ).all()
        )

        return VendorDashboardOutput(
            restaurant_id=restaurant.id,
            total_orders=sum(counts.values()),
            pending_orders=sum(counts.get(s, 0) for s in PENDING_STATUSES),
            completed_orders=counts.get(OrderStatus.DELIVERED, 0),
            cancelled_orders=counts.get(OrderStatus.CANCELLED, 0),
            total_revenue=self._revenue(restaurant.id),
            today_revenue=self._revenue(restaurant.id, since=today),
            week_revenue=self._revenue(restaurant.id, since=now - timedelta(days=7)),
            month_revenue=self._revenue(restaurant.id, since=now - timedelta(days=30)),
            average_rating=round(restaurant.rating, 2),
            total_ratings=restaurant.total_ratings,
        )

    def _revenue(self, restaurant_id: int, since: datetime | None = None) -> float:
        query = select(func.coalesce(func.sum(Order.total_amount), 0.0)).where(
            Order.restaurant_id == restaurant_id,
            Order.is_active.is_(True),
            Order.status != OrderStatus.CANCELLED,
        )
        if since is not None:
            query = query.where(Order.created_at >= since)
        return round(float(self._db.scalar(query) or 0.0), 2)
