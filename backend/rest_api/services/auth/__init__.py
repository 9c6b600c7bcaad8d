"""
Authentication services: role handlers, registration, login and OTP challenges.
"""

from .accounts import ACCOUNT_HANDLERS, AccountHandler, get_handler, issue_session
from .auth_service import AuthService
from .pending_store import PendingRegistration, PendingRegistrationStore, get_pending_store
from .registration_service import RegistrationService

__all__ = [
    "ACCOUNT_HANDLERS",
    "AccountHandler",
    "get_handler",
    "issue_session",
    "AuthService",
    "PendingRegistration",
    "PendingRegistrationStore",
    "get_pending_store",
    "RegistrationService",
]
