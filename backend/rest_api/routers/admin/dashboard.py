"""
Admin dashboard.
"""

from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from rest_api.routers._common import ok
from rest_api.services.domain import AdminService
from shared.infrastructure.db import get_db
from shared.utils.schemas import AdminDashboardOutput, Envelope

from ._base import require_admin


router = APIRouter(prefix="/api/admin", tags=["admin-dashboard"])


@router.get("/dashboard", response_model=Envelope[AdminDashboardOutput])
def get_dashboard(
    db: Session = Depends(get_db),
    ctx: dict[str, Any] = Depends(require_admin),
) -> Envelope[AdminDashboardOutput]:
    """Platform totals, order revenue (cancelled excluded) and status counts."""
    return ok(AdminService(db).get_dashboard())
