"""
Admin order listing.
"""

from typing import Any

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from rest_api.routers._common import Pagination, get_pagination, ok
from rest_api.services.domain import OrderService
from shared.config.constants import Role
from shared.infrastructure.db import get_db
from shared.utils.schemas import Envelope, OrderOutput

from ._base import require_admin


router = APIRouter(prefix="/api/admin", tags=["admin-orders"])


@router.get("/orders", response_model=Envelope[list[OrderOutput]])
def list_orders(
    order_status: str | None = Query(default=None, alias="status"),
    pagination: Pagination = Depends(get_pagination),
    db: Session = Depends(get_db),
    ctx: dict[str, Any] = Depends(require_admin),
) -> Envelope[list[OrderOutput]]:
    """Every order on the platform, newest first, optionally by status."""
    orders, meta = OrderService(db).list_orders(Role.ADMIN.value, None, pagination, status=order_status)
    return ok(orders, pagination=meta)
