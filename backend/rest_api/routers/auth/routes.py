"""
Authentication router.
Handles OTP registration, per-role login, PIN login and account challenges.
"""

from typing import Any

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from rest_api.routers._common import ok
from rest_api.services.auth import (
    AuthService,
    PendingRegistrationStore,
    RegistrationService,
    get_pending_store,
)
from rest_api.services.notifications import OTPSender, get_otp_sender
from shared.config.constants import Role
from shared.config.settings import settings
from shared.infrastructure.db import get_db
from shared.security.auth import current_user_context
from shared.security.rate_limit import limiter
from shared.utils.schemas import (
    AccountChallengeRequest,
    AccountOutput,
    AuthOutput,
    Envelope,
    LoginRequest,
    MessageOutput,
    PinLoginRequest,
    RegistrationOTPOutput,
    ResetPasswordRequest,
    SendRegistrationOTPRequest,
    VerifyEmailOTPRequest,
    VerifyRegistrationOTPRequest,
)


router = APIRouter(prefix="/api/auth", tags=["auth"])


def _client_ip(request: Request) -> str | None:
    return request.client.host if request.client else None


# =============================================================================
# Registration
# =============================================================================


@router.post("/send-registration-otp", response_model=Envelope[RegistrationOTPOutput])
@limiter.limit(settings.otp_rate_limit)
def send_registration_otp(
    request: Request,
    body: SendRegistrationOTPRequest,
    db: Session = Depends(get_db),
    store: PendingRegistrationStore = Depends(get_pending_store),
    sender: OTPSender = Depends(get_otp_sender),
) -> Envelope[RegistrationOTPOutput]:
    """
    Start registration for a customer, vendor or delivery partner.

    Vendors must send restaurant_name; delivery partners vehicle_number.
    A 6-digit code valid for 10 minutes is emailed; sending again
    replaces the previous pending registration for that email.
    """
    result = RegistrationService(db, store, sender).send_registration_otp(body)
    return ok(result, message="OTP sent to your email")


@router.post(
    "/verify-registration-otp",
    response_model=Envelope[AuthOutput],
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit(settings.otp_rate_limit)
def verify_registration_otp(
    request: Request,
    body: VerifyRegistrationOTPRequest,
    db: Session = Depends(get_db),
    store: PendingRegistrationStore = Depends(get_pending_store),
    sender: OTPSender = Depends(get_otp_sender),
) -> Envelope[AuthOutput]:
    """Complete registration with the emailed code and return a session token."""
    result = RegistrationService(db, store, sender).verify_registration_otp(body.email, body.otp)
    return ok(result, message="Registration successful")


# =============================================================================
# Login
# =============================================================================


def _login(request: Request, body: LoginRequest, db: Session, role: Role) -> Envelope[AuthOutput]:
    result = AuthService(db).login(role, body.email, body.password, ip_address=_client_ip(request))
    return ok(result, message="Login successful")


@router.post("/login-customer", response_model=Envelope[AuthOutput])
@limiter.limit(settings.login_rate_limit)
def login_customer(request: Request, body: LoginRequest, db: Session = Depends(get_db)) -> Envelope[AuthOutput]:
    return _login(request, body, db, Role.CUSTOMER)


@router.post("/login-vendor", response_model=Envelope[AuthOutput])
@limiter.limit(settings.login_rate_limit)
def login_vendor(request: Request, body: LoginRequest, db: Session = Depends(get_db)) -> Envelope[AuthOutput]:
    return _login(request, body, db, Role.VENDOR)


@router.post("/login-delivery", response_model=Envelope[AuthOutput])
@limiter.limit(settings.login_rate_limit)
def login_delivery(request: Request, body: LoginRequest, db: Session = Depends(get_db)) -> Envelope[AuthOutput]:
    return _login(request, body, db, Role.DELIVERY)


@router.post("/login-admin", response_model=Envelope[AuthOutput])
@limiter.limit(settings.login_rate_limit)
def login_admin(request: Request, body: LoginRequest, db: Session = Depends(get_db)) -> Envelope[AuthOutput]:
    return _login(request, body, db, Role.ADMIN)


@router.post("/login-pin", response_model=Envelope[AuthOutput])
@limiter.limit(settings.login_rate_limit)
def login_pin(request: Request, body: PinLoginRequest, db: Session = Depends(get_db)) -> Envelope[AuthOutput]:
    """
    Demo PIN login for vendors (optionally scoped by email) and admins.
    Delivery partners must use email and password.
    """
    result = AuthService(db).login_pin(body.role, body.pin, body.email, ip_address=_client_ip(request))
    return ok(result, message="Login successful")


@router.get("/me", response_model=Envelope[AccountOutput])
def me(
    ctx: dict[str, Any] = Depends(current_user_context),
    db: Session = Depends(get_db),
) -> Envelope[AccountOutput]:
    """Account behind the session token."""
    return ok(AuthService(db).get_account(ctx))


# =============================================================================
# Password reset and email verification
# =============================================================================


@router.post("/forgot-password", response_model=Envelope[MessageOutput])
@limiter.limit(settings.otp_rate_limit)
def forgot_password(
    request: Request,
    body: AccountChallengeRequest,
    db: Session = Depends(get_db),
    sender: OTPSender = Depends(get_otp_sender),
) -> Envelope[MessageOutput]:
    """Same reply whether or not the account exists."""
    message = AuthService(db, sender).forgot_password(body.role, body.email)
    return ok(MessageOutput(detail=message), message=message)


@router.post("/reset-password", response_model=Envelope[MessageOutput])
@limiter.limit(settings.otp_rate_limit)
def reset_password(
    request: Request,
    body: ResetPasswordRequest,
    db: Session = Depends(get_db),
) -> Envelope[MessageOutput]:
    AuthService(db).reset_password(body.role, body.email, body.otp, body.new_password)
    return ok(message="Password reset successful")


@router.post("/send-verification-otp", response_model=Envelope[MessageOutput])
@limiter.limit(settings.otp_rate_limit)
def send_verification_otp(
    request: Request,
    body: AccountChallengeRequest,
    db: Session = Depends(get_db),
    sender: OTPSender = Depends(get_otp_sender),
) -> Envelope[MessageOutput]:
    """Same reply whether or not the account exists."""
    message = AuthService(db, sender).send_verification_otp(body.role, body.email)
    return ok(MessageOutput(detail=message), message=message)


@router.post("/verify-email-otp", response_model=Envelope[MessageOutput])
@limiter.limit(settings.otp_rate_limit)
def verify_email_otp(
    request: Request,
    body: VerifyEmailOTPRequest,
    db: Session = Depends(get_db),
) -> Envelope[MessageOutput]:
    AuthService(db).verify_email_otp(body.role, body.email, body.otp)
    return ok(message="Email verified successfully")
