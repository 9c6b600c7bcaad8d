"""
Login and account-challenge workflows.

Password reset and email verification store their codes on the account
row. Requests that could reveal whether an email is registered always
get the same reply.
"""

import hmac
from datetime import datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from rest_api.models import Admin, Vendor
from rest_api.services.auth.accounts import AccountHandler, get_handler, issue_session
from rest_api.services.notifications.email import EmailDeliveryError, OTPSender
from shared.config.constants import ErrorMessages, Role
from shared.config.logging import audit_auth_event, get_logger, mask_email
from shared.config.settings import settings
from shared.infrastructure.db import safe_commit
from shared.security.password import hash_password, verify_dummy_password, verify_password, verify_pin
from shared.utils.exceptions import AuthenticationError, NotFoundError, OTPError, ValidationError
from shared.utils.otp import codes_match, generate_numeric_code, is_expired, otp_expiry
from shared.utils.schemas import AccountOutput, AuthOutput

logger = get_logger(__name__)


class AuthService:
    """Credential checks and OTP challenges on persisted accounts."""

    def __init__(self, db: Session, sender: OTPSender | None = None):
        self._db = db
        self._sender = sender

    # =========================================================================
    # Login
    # =========================================================================

    def login(self, role: Role, email: str, password: str, ip_address: str | None = None) -> AuthOutput:
        handler = get_handler(role)
        account = handler.find_by_email(self._db, email)

        if account is None:
            password_ok = verify_dummy_password(password)
        else:
            password_ok = verify_password(password, account.password_hash)

        if not password_ok:
            audit_auth_event(
                "LOGIN", role=role.value, email=email, success=False,
                reason="invalid_credentials", ip_address=ip_address,
            )
            raise AuthenticationError(ErrorMessages.INVALID_CREDENTIALS)

        return self._complete_login(handler, account, "LOGIN", ip_address)

    def login_pin(
        self,
        role: str,
        pin: str,
        email: str | None = None,
        ip_address: str | None = None,
    ) -> AuthOutput:
        """
        Demo PIN login. Vendors match their PIN (scoped to email when given),
        admins use the configured static PIN, couriers cannot use PINs.
        """
        handler = get_handler(role)

        if handler.role == Role.VENDOR:
            account = self._find_vendor_by_pin(pin, email)
        elif handler.role == Role.ADMIN:
            account = self._find_admin_by_pin(pin)
        elif handler.role == Role.DELIVERY:
            raise ValidationError("PIN login is not available for delivery partners")
        else:
            raise ValidationError(f"PIN login is not available for role '{handler.role.value}'")

        if account is None:
            audit_auth_event(
                "PIN_LOGIN", role=handler.role.value, email=email, success=False,
                reason="invalid_pin", ip_address=ip_address,
            )
            raise AuthenticationError("Invalid PIN")

        return self._complete_login(handler, account, "PIN_LOGIN", ip_address)

    def _find_vendor_by_pin(self, pin: str, email: str | None) -> Vendor | None:
        query = select(Vendor).where(Vendor.is_active.is_(True), Vendor.pin_hash.is_not(None))
        if email:
            query = query.where(Vendor.email == email.lower())
        for vendor in self._db.scalars(query.order_by(Vendor.id)):
            if verify_pin(pin, vendor.pin_hash):
                return vendor
        return None

    def _find_admin_by_pin(self, pin: str) -> Admin | None:
        if not hmac.compare_digest(pin.encode(), settings.admin_pin.encode()):
            return None
        admin = self._db.scalar(
            select(Admin).where(Admin.email == settings.default_admin_email.lower())
        )
        if admin is None:
            admin = self._db.scalar(
                select(Admin).where(Admin.is_active.is_(True)).order_by(Admin.id)
            )
        return admin

    def _complete_login(
        self,
        handler: AccountHandler,
        account: Any,
        event_type: str,
        ip_address: str | None,
    ) -> AuthOutput:
        if not account.is_active:
            audit_auth_event(
                event_type, role=handler.role.value, user_id=account.id, email=account.email,
                success=False, reason="inactive", ip_address=ip_address,
            )
            raise AuthenticationError("Account is deactivated")

        handler.update_last_login(account)
        safe_commit(self._db)
        audit_auth_event(
            event_type, role=handler.role.value, user_id=account.id,
            email=account.email, ip_address=ip_address,
        )
        return issue_session(handler, account)

    def get_account(self, ctx: dict[str, Any]) -> AccountOutput:
        """Resolve the account behind a session token."""
        handler = get_handler(ctx["role"])
        account = handler.find_by_id(self._db, ctx["id"])
        if account is None or not account.is_active:
            raise NotFoundError("Account", ctx["id"], role=ctx["role"])
        return handler.to_output(account)

    # =========================================================================
    # Password reset
    # =========================================================================

    def forgot_password(self, role: str, email: str) -> str:
        handler = get_handler(role)
        account = handler.find_by_email(self._db, email)
        if account is not None and account.is_active:
            code, expires_at = self._issue_code()
            account.reset_otp_code = code
            account.reset_otp_expires_at = expires_at
            safe_commit(self._db)
            self._send_quietly(account.email, code, "password_reset")
        else:
            logger.info("Password reset requested for unknown email", role=handler.role.value, email=mask_email(email))
        return ErrorMessages.PASSWORD_RESET_SENT

    def reset_password(self, role: str, email: str, otp: str, new_password: str) -> None:
        handler = get_handler(role)
        account = handler.find_by_email(self._db, email)
        if account is None or not self._code_valid(account.reset_otp_code, account.reset_otp_expires_at, otp):
            raise OTPError(ErrorMessages.INVALID_OR_EXPIRED_OTP, purpose="password_reset", email=mask_email(email))

        account.password_hash = hash_password(new_password)
        account.reset_otp_code = None
        account.reset_otp_expires_at = None
        safe_commit(self._db)
        audit_auth_event("PASSWORD_RESET", role=handler.role.value, user_id=account.id, email=email)

    # =========================================================================
    # Email verification
    # =========================================================================

    def send_verification_otp(self, role: str, email: str) -> str:
        handler = get_handler(role)
        account = handler.find_by_email(self._db, email)
        if account is not None and account.is_active:
            code, expires_at = self._issue_code()
            account.verification_otp_code = code
            account.verification_otp_expires_at = expires_at
            safe_commit(self._db)
            self._send_quietly(account.email, code, "email_verification")
        return ErrorMessages.VERIFICATION_SENT

    def verify_email_otp(self, role: str, email: str, otp: str) -> None:
        handler = get_handler(role)
        account = handler.find_by_email(self._db, email)
        if account is None or not self._code_valid(
            account.verification_otp_code, account.verification_otp_expires_at, otp
        ):
            raise OTPError(ErrorMessages.INVALID_OR_EXPIRED_OTP, purpose="email_verification", email=mask_email(email))

        account.email_verified = True
        account.verification_otp_code = None
        account.verification_otp_expires_at = None
        safe_commit(self._db)
        audit_auth_event("EMAIL_VERIFY", role=handler.role.value, user_id=account.id, email=email)

    # =========================================================================
    # Helpers
    # =========================================================================

    @staticmethod
    def _issue_code() -> tuple[str, datetime]:
        return generate_numeric_code(settings.registration_otp_length), otp_expiry()

    @staticmethod
    def _code_valid(stored: str | None, expires_at: datetime | None, candidate: str) -> bool:
        return codes_match(stored, candidate) and not is_expired(expires_at)

    def _send_quietly(self, email: str, code: str, purpose: str) -> None:
        """Send without letting delivery failures change the uniform reply."""
        if self._sender is None:
            return
        try:
            self._sender.send_otp(email, code, purpose)
        except EmailDeliveryError as e:
            logger.error("Failed to send OTP email", email=mask_email(email), purpose=purpose, error=str(e))
