"""
Outgoing notifications (OTP email).
"""

from .email import (
    EmailDeliveryError,
    LoggingEmailSender,
    OTPSender,
    SMTPEmailSender,
    get_otp_sender,
)

__all__ = [
    "EmailDeliveryError",
    "LoggingEmailSender",
    "OTPSender",
    "SMTPEmailSender",
    "get_otp_sender",
]
