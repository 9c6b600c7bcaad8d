"""
OTP-gated self-registration for customers, vendors and delivery partners.

1. send_registration_otp validates the submission, rejects existing
   accounts, parks the fields in the pending store and emails a code.
2. verify_registration_otp checks the code, creates the account (a vendor
   gets its restaurant in the same transaction) and issues a session token.
"""

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from rest_api.services.auth.accounts import get_handler, issue_session
from rest_api.services.auth.pending_store import PendingRegistration, PendingRegistrationStore
from rest_api.services.notifications.email import EmailDeliveryError, OTPSender
from shared.config.constants import ErrorMessages, Role, SELF_REGISTRATION_ROLES
from shared.config.logging import audit_auth_event, get_logger, mask_email
from shared.config.settings import settings
from shared.infrastructure.db import safe_commit
from shared.security.password import hash_password
from shared.utils.exceptions import (
    DatabaseError,
    DuplicateEntityError,
    InternalError,
    OTPError,
    ValidationError,
)
from shared.utils.otp import codes_match, generate_numeric_code, otp_expiry
from shared.utils.schemas import (
    AuthOutput,
    RegistrationOTPOutput,
    SendRegistrationOTPRequest,
)

logger = get_logger(__name__)

# Registration fields kept aside until the account is created
EXTRA_FIELDS = (
    "restaurant_name",
    "cuisine",
    "street",
    "city",
    "state",
    "pincode",
    "vehicle_number",
    "vehicle_type",
)


class RegistrationService:
    """Self-registration workflow backed by a PendingRegistrationStore."""

    def __init__(self, db: Session, store: PendingRegistrationStore, sender: OTPSender):
        self._db = db
        self._store = store
        self._sender = sender

    def send_registration_otp(self, body: SendRegistrationOTPRequest) -> RegistrationOTPOutput:
        self._store.sweep_expired()

        role = Role(body.role)
        if role not in SELF_REGISTRATION_ROLES:
            raise ValidationError(f"Self-registration is not available for role '{role.value}'")
        handler = get_handler(role)

        missing = [name for name in handler.required_fields() if not getattr(body, name)]
        if missing:
            raise ValidationError(
                f"Missing required fields for {role.value}: {', '.join(missing)}",
                missing=missing,
            )

        email = body.email.lower()
        if handler.find_by_email_or_phone(self._db, email, body.phone):
            raise DuplicateEntityError(
                role.value, detail=ErrorMessages.ACCOUNT_EXISTS, email=mask_email(email)
            )

        pending = PendingRegistration(
            role=role,
            name=body.name.strip(),
            email=email,
            phone=body.phone,
            password_hash=hash_password(body.password),
            code=generate_numeric_code(settings.registration_otp_length),
            expires_at=otp_expiry(),
            extra={name: getattr(body, name) for name in EXTRA_FIELDS if getattr(body, name)},
        )
        self._store.put(pending)

        try:
            self._sender.send_otp(email, pending.code, "registration")
        except EmailDeliveryError as e:
            self._store.pop(email)
            raise InternalError(
                ErrorMessages.OTP_SEND_FAILED, email=mask_email(email), error=str(e)
            )

        logger.info("Registration OTP sent", role=role.value, email=mask_email(email))
        return RegistrationOTPOutput(email=email, expires_at=pending.expires_at)

    def verify_registration_otp(self, email: str, otp: str) -> AuthOutput:
        email = email.lower()
        pending = self._store.peek(email)
        if pending is None:
            raise OTPError(ErrorMessages.NO_PENDING_REGISTRATION, purpose="registration")
        if pending.is_expired():
            self._store.pop(email)
            raise OTPError(ErrorMessages.OTP_EXPIRED, purpose="registration", email=mask_email(email))
        if not codes_match(pending.code, otp):
            raise OTPError(ErrorMessages.INVALID_OTP, purpose="registration", email=mask_email(email))

        self._store.sweep_expired()

        handler = get_handler(pending.role)
        # The account may have been created by a parallel registration
        if handler.find_by_email_or_phone(self._db, email, pending.phone):
            self._store.pop(email)
            raise DuplicateEntityError(pending.role.value, detail=ErrorMessages.ACCOUNT_EXISTS)

        account = handler.create(self._db, pending)
        try:
            safe_commit(self._db)
        except IntegrityError:
            raise DuplicateEntityError(pending.role.value, detail=ErrorMessages.ACCOUNT_EXISTS)
        except SQLAlchemyError as e:
            raise DatabaseError("registration", role=pending.role.value, error=str(e))
        self._db.refresh(account)

        self._store.pop(email)
        audit_auth_event("REGISTER", role=pending.role.value, user_id=account.id, email=email)
        return issue_session(handler, account)
