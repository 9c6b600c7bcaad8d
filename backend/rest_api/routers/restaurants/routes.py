"""
Restaurants router.
Public endpoints, no authentication required.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from rest_api.routers._common import ok
from rest_api.services.domain import RestaurantService
from shared.config.constants import Limits
from shared.infrastructure.db import get_db
from shared.utils.schemas import (
    Envelope,
    MenuItemOutput,
    MenuOutput,
    RestaurantDetailOutput,
    RestaurantOutput,
    RestaurantStatsOutput,
)


router = APIRouter(prefix="/api/restaurants", tags=["restaurants"])


@router.get("", response_model=Envelope[list[RestaurantOutput]])
def list_restaurants(
    search: str | None = Query(default=None, max_length=Limits.MAX_SEARCH_TERM_LENGTH),
    cuisine: str | None = Query(default=None, max_length=Limits.MAX_SEARCH_TERM_LENGTH),
    is_open: bool | None = Query(default=None),
    db: Session = Depends(get_db),
) -> Envelope[list[RestaurantOutput]]:
    """Active restaurants sorted by rating. `search` matches name or cuisine."""
    return ok(RestaurantService(db).list_restaurants(search=search, cuisine=cuisine, is_open=is_open))


# Static paths are declared before /{restaurant_id}


@router.get("/open", response_model=Envelope[list[RestaurantOutput]])
def list_open_restaurants(db: Session = Depends(get_db)) -> Envelope[list[RestaurantOutput]]:
    return ok(RestaurantService(db).list_open())


@router.get("/search/{query}", response_model=Envelope[list[RestaurantOutput]])
def search_restaurants(
    query: str,
    limit: int = Query(default=Limits.SEARCH_RESULT_LIMIT, ge=1, le=Limits.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
) -> Envelope[list[RestaurantOutput]]:
    """Search name, cuisine and description."""
    return ok(RestaurantService(db).search(query, limit=limit))


@router.get("/cuisine/{cuisine}", response_model=Envelope[list[RestaurantOutput]])
def restaurants_by_cuisine(
    cuisine: str,
    limit: int = Query(default=20, ge=1, le=Limits.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
) -> Envelope[list[RestaurantOutput]]:
    return ok(RestaurantService(db).list_by_cuisine(cuisine, limit=limit))


@router.get("/{restaurant_id}", response_model=Envelope[RestaurantDetailOutput])
def get_restaurant(restaurant_id: int, db: Session = Depends(get_db)) -> Envelope[RestaurantDetailOutput]:
    """Restaurant detail with its available menu."""
    return ok(RestaurantService(db).get_detail(restaurant_id))


@router.get("/{restaurant_id}/menu", response_model=Envelope[MenuOutput])
def get_menu(restaurant_id: int, db: Session = Depends(get_db)) -> Envelope[MenuOutput]:
    """Available menu items only."""
    name, items = RestaurantService(db).get_menu(restaurant_id)
    return ok(MenuOutput(restaurant_id=restaurant_id, restaurant_name=name, menu=items))


@router.get("/{restaurant_id}/menu/{item_id}", response_model=Envelope[MenuItemOutput])
def get_menu_item(restaurant_id: int, item_id: int, db: Session = Depends(get_db)) -> Envelope[MenuItemOutput]:
    return ok(RestaurantService(db).get_menu_item(restaurant_id, item_id))


@router.get("/{restaurant_id}/stats", response_model=Envelope[RestaurantStatsOutput])
def get_restaurant_stats(restaurant_id: int, db: Session = Depends(get_db)) -> Envelope[RestaurantStatsOutput]:
    return ok(RestaurantService(db).get_stats(restaurant_id))
