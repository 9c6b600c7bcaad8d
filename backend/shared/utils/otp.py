"""
One-time numeric codes and expiry checks.

Stored expiries may come back naive from SQLite; they are treated as UTC.
"""

import hmac
import secrets
from datetime import datetime, timedelta, timezone

from shared.config.settings import settings


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_aware(value: datetime) -> datetime:
    """Attach UTC to naive datetimes."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def generate_numeric_code(length: int) -> str:
    """Generate a uniformly random code of `length` digits (leading zeros allowed)."""
    return f"{secrets.randbelow(10 ** length):0{length}d}"


def otp_expiry(minutes: int | None = None) -> datetime:
    return utcnow() + timedelta(minutes=minutes or settings.otp_expire_minutes)


def is_expired(expires_at: datetime | None, now: datetime | None = None) -> bool:
    if expires_at is None:
        return True
    return ensure_aware(expires_at) <= (now or utcnow())


def codes_match(stored: str | None, candidate: str | None) -> bool:
    """Constant-time comparison of a stored code with a submitted one."""
    if not stored or candidate is None:
        return False
    return hmac.compare_digest(stored.encode(), candidate.strip().encode())
