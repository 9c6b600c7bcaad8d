"""
Security module: session tokens, password hashing, rate limiting.
"""

from shared.security.auth import (
    sign_jwt,
    sign_session_token,
    verify_jwt,
    get_bearer_token,
    current_user_context,
    require_roles,
    require_account,
)
from shared.security.password import hash_password, verify_password, hash_pin, verify_pin
from shared.security.rate_limit import limiter, rate_limit_exceeded_handler

__all__ = [
    # auth
    "sign_jwt",
    "sign_session_token",
    "verify_jwt",
    "get_bearer_token",
    "current_user_context",
    "require_roles",
    "require_account",
    # password
    "hash_password",
    "verify_password",
    "hash_pin",
    "verify_pin",
    # rate_limit
    "limiter",
    "rate_limit_exceeded_handler",
]
