"""
Services module for business logic.

- domain/: Application services (order lifecycle, assignment, surfaces)
- auth/: Registration, login and account challenges
- notifications/: OTP email delivery

Usage:
    from rest_api.services.domain import OrderService
    service = OrderService(db)
    order = service.get_order(order_id)
"""

from .domain import (
    AdminService,
    AssignmentService,
    CustomerService,
    DeliveryService,
    OrderService,
    RestaurantService,
    VendorService,
)
from .auth import AuthService, RegistrationService, get_pending_store
from .notifications import get_otp_sender

__all__ = [
    # Domain
    "OrderService",
    "AssignmentService",
    "RestaurantService",
    "VendorService",
    "DeliveryService",
    "CustomerService",
    "AdminService",
    # Auth
    "AuthService",
    "RegistrationService",
    "get_pending_store",
    # Notifications
    "get_otp_sender",
]
