"""
OTP email delivery.

SMTPEmailSender talks to the configured relay with smtplib.
LoggingEmailSender is used when no SMTP host is configured (local
development) and only logs that a code was issued.

Callers decide what a delivery failure means: order placement logs and
continues, registration fails the request.
"""

import smtplib
from email.message import EmailMessage
from functools import lru_cache
from typing import Protocol

from shared.config.logging import get_logger, mask_email
from shared.config.settings import settings

logger = get_logger(__name__)


class EmailDeliveryError(Exception):
    """The OTP email could not be handed to the mail server."""


class OTPSender(Protocol):
    def send_otp(self, to_email: str, code: str, purpose: str) -> None:
        """Deliver `code` to `to_email`. Raises EmailDeliveryError on failure."""
        ...


SUBJECTS = {
    "registration": "Your Gaon Zaika registration code",
    "order": "Your Gaon Zaika delivery code",
    "password_reset": "Reset your Gaon Zaika password",
    "email_verification": "Verify your Gaon Zaika email",
}


def render_otp_body(code: str, purpose: str) -> str:
    if purpose == "order":
        return (
            f"Your order delivery code is {code}.\n"
            "Share it with the delivery partner only when you receive your order.\n"
            f"It expires in {settings.otp_expire_minutes} minutes."
        )
    return (
        f"Your verification code is {code}.\n"
        f"It expires in {settings.otp_expire_minutes} minutes.\n"
        "If you did not request this, you can ignore this email."
    )


class SMTPEmailSender:
    """Send OTP emails through an SMTP relay (STARTTLS + login when configured)."""

    def __init__(
        self,
        host: str,
        port: int,
        username: str = "",
        password: str = "",
        from_address: str = "",
        use_tls: bool = True,
        timeout: float = 10.0,
    ):
        self._host = host
        self._port = port
        self._username = username
        self._password = password
        self._from = from_address
        self._use_tls = use_tls
        self._timeout = timeout

    def send_otp(self, to_email: str, code: str, purpose: str) -> None:
        msg = EmailMessage()
        msg["Subject"] = SUBJECTS.get(purpose, "Your Gaon Zaika code")
        msg["From"] = self._from
        msg["To"] = to_email
        msg.set_content(render_otp_body(code, purpose))

        try:
            with smtplib.SMTP(self._host, self._port, timeout=self._timeout) as server:
                if self._use_tls:
                    server.starttls()
                if self._username:
                    server.login(self._username, self._password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            raise EmailDeliveryError(str(e)) from e

        logger.info("OTP email sent", email=mask_email(to_email), purpose=purpose)


class LoggingEmailSender:
    """Development sender: records that a code was issued without sending it."""

    def send_otp(self, to_email: str, code: str, purpose: str) -> None:
        if settings.debug:
            logger.info("OTP issued (email not configured)", email=mask_email(to_email), purpose=purpose, code=code)
        else:
            logger.info("OTP issued (email not configured)", email=mask_email(to_email), purpose=purpose)


@lru_cache
def get_otp_sender() -> OTPSender:
    """
    FastAPI dependency returning the configured sender.
    Tests override it with a recording fake.
    """
    if not settings.smtp_host:
        return LoggingEmailSender()
    return SMTPEmailSender(
        host=settings.smtp_host,
        port=settings.smtp_port,
        username=settings.smtp_user,
        password=settings.smtp_password,
        from_address=settings.smtp_from,
        use_tls=settings.smtp_use_tls,
        timeout=settings.smtp_timeout_seconds,
    )
