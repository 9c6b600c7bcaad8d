"""
In-process store for registrations awaiting OTP confirmation.

Entries are keyed by email, expire after the OTP window and are evicted
lazily: on read, and by sweep_expired() which the registration workflow
calls on every request. A later registration for the same email replaces
the earlier one, so only the latest code validates.

Nothing here survives a restart; a lost entry just means the user asks
for a new code.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from shared.config.constants import Role
from shared.utils.otp import is_expired, utcnow


@dataclass
class PendingRegistration:
    """Submitted registration fields plus the code that unlocks them."""

    role: Role
    name: str
    email: str
    phone: str
    password_hash: str
    code: str
    expires_at: datetime
    extra: dict[str, Any] = field(default_factory=dict)

    def is_expired(self, now: datetime | None = None) -> bool:
        return is_expired(self.expires_at, now)


class PendingRegistrationStore:
    """Thread-safe keyed store with expiry."""

    def __init__(self) -> None:
        self._entries: dict[str, PendingRegistration] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _key(email: str) -> str:
        return email.strip().lower()

    def put(self, record: PendingRegistration) -> None:
        """Insert or replace the pending registration for record.email."""
        with self._lock:
            self._entries[self._key(record.email)] = record

    def get(self, email: str) -> PendingRegistration | None:
        """Return the live entry for email, evicting it if it has expired."""
        key = self._key(email)
        with self._lock:
            record = self._entries.get(key)
            if record is not None and record.is_expired():
                del self._entries[key]
                return None
            return record

    def peek(self, email: str) -> PendingRegistration | None:
        """Return the entry for email without checking expiry."""
        with self._lock:
            return self._entries.get(self._key(email))

    def pop(self, email: str) -> PendingRegistration | None:
        with self._lock:
            return self._entries.pop(self._key(email), None)

    def sweep_expired(self, now: datetime | None = None) -> int:
        """Drop every expired entry. Returns how many were removed."""
        now = now or utcnow()
        with self._lock:
            expired = [key for key, record in self._entries.items() if record.is_expired(now)]
            for key in expired:
                del self._entries[key]
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


# Process-wide instance used by the API; tests inject their own
_default_store = PendingRegistrationStore()


def get_pending_store() -> PendingRegistrationStore:
    """FastAPI dependency returning the process-wide store."""
    return _default_store
