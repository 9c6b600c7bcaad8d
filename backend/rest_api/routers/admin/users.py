"""
Admin partner account listing.
"""

from typing import Any

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from rest_api.routers._common import Pagination, get_pagination, ok
from rest_api.services.domain import AdminService
from shared.infrastructure.db import get_db
from shared.utils.schemas import Envelope, UserSummaryOutput

from ._base import require_admin


router = APIRouter(prefix="/api/admin", tags=["admin-users"])


@router.get("/users", response_model=Envelope[list[UserSummaryOutput]])
def list_users(
    role: str | None = Query(default=None, description="vendor or delivery"),
    pagination: Pagination = Depends(get_pagination),
    db: Session = Depends(get_db),
    ctx: dict[str, Any] = Depends(require_admin),
) -> Envelope[list[UserSummaryOutput]]:
    """Vendors and delivery partners, newest first."""
    users, meta = AdminService(db).list_users(pagination, role=role)
    return ok(users, pagination=meta)
