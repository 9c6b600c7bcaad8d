"""
Shared dependencies for admin routers.
"""

from typing import Any

from fastapi import Depends, HTTPException, status

from shared.config.constants import Role
from shared.security.auth import current_user_context


def require_admin(ctx: dict[str, Any] = Depends(current_user_context)) -> dict[str, Any]:
    """Dependency that requires the admin role."""
    if ctx.get("role") != Role.ADMIN.value:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin role required",
        )
    return ctx
