"""
Rate limiting using slowapi, keyed by client IP.
Protects the login and OTP endpoints from brute force and email flooding.

Usage in a router:

    from shared.security.rate_limit import limiter

    @router.post("/login-customer")
    @limiter.limit(settings.login_rate_limit)
    def login_customer(request: Request, ...):
        ...
"""

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from shared.config.constants import ErrorMessages
from shared.config.logging import get_logger
from shared.config.settings import settings

logger = get_logger(__name__)

limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """
    Render slowapi's RateLimitExceeded in the standard response envelope.
    """
    logger.warning(
        "Rate limit exceeded",
        path=request.url.path,
        client=get_remote_address(request),
        limit=str(exc.detail),
    )
    return JSONResponse(
        status_code=429,
        content={
            "success": False,
            "message": ErrorMessages.RATE_LIMIT_EXCEEDED,
            "errors": [{"field": None, "message": f"Limit: {exc.detail}"}],
        },
        headers={"Retry-After": "60"},
    )
