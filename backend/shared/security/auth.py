"""
Authentication and authorization utilities.
Session tokens are HS256 JWTs whose application claims are {id, role}.
"""

from __future__ import annotations

import time
import uuid
from typing import Any

import jwt
from fastapi import Header, HTTPException, status

from shared.config.constants import ErrorMessages, Role
from shared.config.logging import get_logger
from shared.config.settings import JWT_AUDIENCE, JWT_ISSUER, JWT_SECRET, settings

logger = get_logger(__name__)

VALID_ROLES = {role.value for role in Role}


# =============================================================================
# JWT Functions
# =============================================================================


def sign_jwt(payload: dict[str, Any], ttl_seconds: int | None = None) -> str:
    """
    Sign a JWT token with the given payload.

    Args:
        payload: Application claims (id, role).
        ttl_seconds: Token lifetime in seconds. Defaults to the session expiry.

    Returns:
        Signed JWT token string.
    """
    if ttl_seconds is None:
        ttl_seconds = settings.session_token_expire_days * 24 * 60 * 60

    now = int(time.time())
    data = {
        **payload,
        "iss": JWT_ISSUER,
        "aud": JWT_AUDIENCE,
        "iat": now,
        "exp": now + ttl_seconds,
        "jti": str(uuid.uuid4()),
    }
    return jwt.encode(data, JWT_SECRET, algorithm="HS256")


def sign_session_token(account_id: int, role: Role | str) -> str:
    """Issue the session token returned by every login and registration."""
    role_value = role.value if isinstance(role, Role) else role
    return sign_jwt({"id": account_id, "role": role_value})


def verify_jwt(token: str) -> dict[str, Any]:
    """
    Verify and decode a session token.

    Returns:
        Decoded token claims.

    Raises:
        HTTPException: If token is invalid, expired, or missing its claims.
    """
    try:
        payload = jwt.decode(
            token,
            JWT_SECRET,
            algorithms=["HS256"],
            audience=JWT_AUDIENCE,
            issuer=JWT_ISSUER,
        )
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=ErrorMessages.TOKEN_EXPIRED,
        )
    except jwt.InvalidTokenError as e:
        # Log the real reason, return a generic message
        logger.warning("JWT validation failed", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=ErrorMessages.INVALID_TOKEN,
        )

    if not isinstance(payload.get("id"), int):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token: malformed id claim",
        )
    if payload.get("role") not in VALID_ROLES:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token: unknown role claim",
        )
    return payload


# =============================================================================
# FastAPI dependencies
# =============================================================================


def get_bearer_token(authorization: str | None) -> str:
    """
    Extract bearer token from Authorization header.

    Raises:
        HTTPException: If header is missing or malformed.
    """
    if not authorization:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=ErrorMessages.NOT_AUTHENTICATED,
        )
    if not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid Authorization header format. Expected: Bearer <token>",
        )
    return authorization.split(" ", 1)[1].strip()


def current_user_context(
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> dict[str, Any]:
    """
    FastAPI dependency to get the current account context from the JWT.

    Usage:
        @router.get("/protected")
        def protected_endpoint(ctx = Depends(current_user_context)):
            account_id = ctx["id"]
            role = ctx["role"]
    """
    token = get_bearer_token(authorization)
    return verify_jwt(token)


def require_roles(ctx: dict[str, Any], allowed: list[str] | frozenset[str]) -> None:
    """
    Verify that the caller's role is one of the allowed roles.

    Raises:
        HTTPException: If the role is not permitted.
    """
    allowed_values = {r.value if isinstance(r, Role) else r for r in allowed}
    if ctx.get("role") not in allowed_values:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"{ErrorMessages.INSUFFICIENT_PERMISSIONS}. Required role: one of {sorted(allowed_values)}",
        )


def require_account(ctx: dict[str, Any], role: Role, account_id: int) -> None:
    """
    Verify that the caller is exactly the given account.

    Admins pass every ownership check.

    Raises:
        HTTPException: If the token belongs to another account or role.
    """
    if ctx.get("role") == Role.ADMIN.value:
        return
    if ctx.get("role") != role.value or ctx.get("id") != account_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"{ErrorMessages.INSUFFICIENT_PERMISSIONS}. Token does not belong to this {role.value} account",
        )
