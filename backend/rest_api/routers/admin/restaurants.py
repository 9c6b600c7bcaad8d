"""
Admin restaurant listing.
"""

from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from rest_api.routers._common import Pagination, get_pagination, ok
from rest_api.services.domain import AdminService
from shared.infrastructure.db import get_db
from shared.utils.schemas import Envelope, RestaurantOutput

from ._base import require_admin


router = APIRouter(prefix="/api/admin", tags=["admin-restaurants"])


@router.get("/restaurants", response_model=Envelope[list[RestaurantOutput]])
def list_restaurants(
    pagination: Pagination = Depends(get_pagination),
    db: Session = Depends(get_db),
    ctx: dict[str, Any] = Depends(require_admin),
) -> Envelope[list[RestaurantOutput]]:
    """All active restaurants, open or closed, newest first."""
    restaurants, meta = AdminService(db).list_restaurants(pagination)
    return ok(restaurants, pagination=meta)
