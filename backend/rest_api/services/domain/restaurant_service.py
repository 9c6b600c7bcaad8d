"""
Restaurant Service.

Public browsing: listing, search, detail, menu and per-restaurant stats.
Only active restaurants are visible; menus only show available items.

Usage:
    from rest_api.services.domain import RestaurantService

    service = RestaurantService(db)
    restaurants = service.list_restaurants(search="biryani", is_open=True)
"""

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session, selectinload

from rest_api.models import MenuItem, Order, Restaurant
from shared.config.constants import Limits, OrderStatus
from shared.utils.exceptions import NotFoundError, RestaurantNotFoundError
from shared.utils.schemas import (
    MenuItemOutput,
    RestaurantDetailOutput,
    RestaurantOutput,
    RestaurantStatsOutput,
)
from shared.utils.validators import escape_like_pattern, sanitize_search_term


def _contains(column, term: str):
    """Case-insensitive substring match with LIKE wildcards escaped."""
    return column.ilike(f"%{escape_like_pattern(term)}%", escape="\\")


class RestaurantService:
    """Read-side queries over restaurants and their menus."""

    def __init__(self, db: Session):
        self._db = db

    # =========================================================================
    # Listing
    # =========================================================================

    def list_restaurants(
        self,
        search: str | None = None,
        cuisine: str | None = None,
        is_open: bool | None = None,
        limit: int | None = None,
    ) -> list[RestaurantOutput]:
        """Active restaurants, best rated first."""
        query = select(Restaurant).where(Restaurant.is_active.is_(True))

        search = sanitize_search_term(search or "", Limits.MAX_SEARCH_TERM_LENGTH)
        if search:
            query = query.where(or_(_contains(Restaurant.name, search), _contains(Restaurant.cuisine, search)))

        cuisine = sanitize_search_term(cuisine or "", Limits.MAX_SEARCH_TERM_LENGTH)
        if cuisine:
            query = query.where(_contains(Restaurant.cuisine, cuisine))

        if is_open is not None:
            query = query.where(Restaurant.is_open.is_(is_open))

        query = query.order_by(
            Restaurant.rating.desc(), Restaurant.total_ratings.desc(), Restaurant.id.asc()
        )
        if limit is not None:
            query = query.limit(limit)

        return [self.to_output(r) for r in self._db.scalars(query).all()]

    def list_open(self) -> list[RestaurantOutput]:
        return self.list_restaurants(is_open=True)

    def list_by_cuisine(self, cuisine: str, limit: int = 20) -> list[RestaurantOutput]:
        return self.list_restaurants(cuisine=cuisine, limit=limit)

    def search(self, term: str, limit: int = Limits.SEARCH_RESULT_LIMIT) -> list[RestaurantOutput]:
        """Match name, cuisine or description."""
        term = sanitize_search_term(term, Limits.MAX_SEARCH_TERM_LENGTH)
        if not term:
            return []
        query = (
            select(Restaurant)
            .where(
                Restaurant.is_active.is_(True),
                or_(
                    _contains(Restaurant.name, term),
                    _contains(Restaurant.cuisine, term),
                    _contains(Restaurant.description, term),
                ),
            )
            .order_by(Restaurant.rating.desc(), Restaurant.id.asc())
            .limit(limit)
        )
        return [self.to_output(r) for r in self._db.scalars(query).all()]

    # =========================================================================
    # Detail
    # =========================================================================

    def get_restaurant(self, restaurant_id: int) -> Restaurant:
        restaurant = self._db.scalar(
            select(Restaurant)
            .options(selectinload(Restaurant.menu_items))
            .where(Restaurant.id == restaurant_id, Restaurant.is_active.is_(True))
        )
        if restaurant is None:
            raise RestaurantNotFoundError(restaurant_id)
        return restaurant

    def get_detail(self, restaurant_id: int) -> RestaurantDetailOutput:
        restaurant = self.get_restaurant(restaurant_id)
        output = RestaurantDetailOutput.model_validate(restaurant, from_attributes=True)
        output.menu = self._available_menu(restaurant)
        return output

    def get_menu(self, restaurant_id: int) -> tuple[str, list[MenuItemOutput]]:
        """Restaurant name and its available items."""
        restaurant = self.get_restaurant(restaurant_id)
        return restaurant.name, self._available_menu(restaurant)

    def get_menu_item(self, restaurant_id: int, item_id: int) -> MenuItemOutput:
        self.get_restaurant(restaurant_id)
        item = self._db.scalar(
            select(MenuItem).where(
                MenuItem.id == item_id,
                MenuItem.restaurant_id == restaurant_id,
                MenuItem.is_active.is_(True),
            )
        )
        if item is None:
            raise NotFoundError("Menu item", item_id, restaurant_id=restaurant_id)
        return MenuItemOutput.model_validate(item, from_attributes=True)

    def get_stats(self, restaurant_id: int) -> RestaurantStatsOutput:
        restaurant = self.get_restaurant(restaurant_id)
        items = [i for i in restaurant.menu_items if i.is_active]

        categories: list[str] = []
        for item in items:
            if item.category not in categories:
                categories.append(item.category)

        delivered = self._db.scalar(
            select(func.count(Order.id)).where(
                Order.restaurant_id == restaurant.id,
                Order.status == OrderStatus.DELIVERED,
            )
        ) or 0

        return RestaurantStatsOutput(
            restaurant_id=restaurant.id,
            rating=round(restaurant.rating, 2),
            total_ratings=restaurant.total_ratings,
            total_menu_items=len(items),
            available_menu_items=sum(1 for i in items if i.is_available),
            veg_items=sum(1 for i in items if i.is_veg),
            categories=categories,
            delivered_orders=delivered,
        )

    # =========================================================================
    # Helpers
    # =========================================================================

    @staticmethod
    def _available_menu(restaurant: Restaurant) -> list[MenuItemOutput]:
        return [
            MenuItemOutput.model_validate(item, from_attributes=True)
            for item in restaurant.menu_items
            if item.is_active and item.is_available
        ]

    @staticmethod
    def to_output(restaurant: Restaurant) -> RestaurantOutput:
        return RestaurantOutput.model_validate(restaurant, from_attributes=True)
