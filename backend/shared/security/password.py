"""
Password and PIN hashing utilities using bcrypt.
"""

from functools import lru_cache

import bcrypt

from shared.config.logging import get_logger
from shared.config.settings import settings

logger = get_logger(__name__)

BCRYPT_PREFIXES = ("$2a$", "$2b$", "$2y$")


def hash_password(password: str) -> str:
    """
    Hash a password (or PIN) using bcrypt.

    Example:
        hashed = hash_password("mypassword123")
        # Returns something like: $2b$12$...
    """
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str | None) -> bool:
    """
    Verify a password against its bcrypt hash.

    Returns False for missing or non-bcrypt hashes instead of raising.
    """
    if not hashed_password:
        return False
    if not hashed_password.startswith(BCRYPT_PREFIXES):
        logger.warning("SECURITY: non-bcrypt credential hash rejected")
        return False

    return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    return hash_password("not-a-real-account")


def verify_dummy_password(plain_password: str) -> bool:
    """
    Run a full bcrypt check for a lookup that found no account.

    Keeps failed logins for unknown emails as slow as those for known ones.
    Always returns False.
    """
    verify_password(plain_password, _dummy_hash())
    return False


# PINs use the same scheme; separate names keep call sites readable
hash_pin = hash_password
verify_pin = verify_password
