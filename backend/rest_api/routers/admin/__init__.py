"""
Admin API router - combines all admin sub-routers.

- dashboard: Platform totals and revenue
- restaurants: Restaurant listing
- orders: Platform-wide order listing
- users: Vendor and delivery partner accounts
- assignments: On-demand delivery assignment sweep

All routes are prefixed with /api/admin and require the admin role.
"""

from fastapi import APIRouter

from .dashboard import router as dashboard_router
from .restaurants import router as restaurants_router
from .orders import router as orders_router
from .users import router as users_router
from .assignments import router as assignments_router


# Create the main admin router
router = APIRouter()

router.include_router(dashboard_router)
router.include_router(restaurants_router)
router.include_router(orders_router)
router.include_router(users_router)
router.include_router(assignments_router)


__all__ = ["router"]
