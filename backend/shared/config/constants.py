"""
Centralized constants for the backend application.

Usage:
    from shared.config.constants import Role, OrderStatus

    if role == Role.VENDOR:
        ...

    if order.status in OrderStatus.TERMINAL:
        ...
"""

from enum import Enum
from typing import Final


# =============================================================================
# Account Roles
# =============================================================================


class Role(str, Enum):
    """Account role carried in session tokens."""

    CUSTOMER = "customer"
    VENDOR = "vendor"
    DELIVERY = "delivery"
    ADMIN = "admin"


# Roles allowed to self-register through the OTP workflow
SELF_REGISTRATION_ROLES: Final[frozenset[Role]] = frozenset(
    {Role.CUSTOMER, Role.VENDOR, Role.DELIVERY}
)

# Roles allowed to move an order through its lifecycle
ORDER_STATUS_ROLES: Final[frozenset[str]] = frozenset(
    {Role.VENDOR.value, Role.DELIVERY.value, Role.ADMIN.value}
)

ADMIN_PERMISSIONS: Final[list[str]] = [
    "read",
    "write",
    "delete",
    "manage_users",
    "manage_restaurants",
    "manage_orders",
    "view_analytics",
]


# =============================================================================
# Order Lifecycle
# =============================================================================


class OrderStatus:
    """Order status constants."""

    PLACED: Final[str] = "Order Placed"
    ACCEPTED: Final[str] = "Accepted"
    PREPARING: Final[str] = "Preparing"
    OUT_FOR_DELIVERY: Final[str] = "Out for Delivery"
    DELIVERED: Final[str] = "Delivered"
    CANCELLED: Final[str] = "Cancelled"

    # Forward sequence (Cancelled sits outside it)
    SEQUENCE: Final[list[str]] = [PLACED, ACCEPTED, PREPARING, OUT_FOR_DELIVERY, DELIVERED]
    ALL: Final[list[str]] = [PLACED, ACCEPTED, PREPARING, OUT_FOR_DELIVERY, DELIVERED, CANCELLED]
    TERMINAL: Final[list[str]] = [DELIVERED, CANCELLED]
    ACTIVE: Final[list[str]] = [PLACED, ACCEPTED, PREPARING, OUT_FOR_DELIVERY]


def _build_order_transitions() -> dict[str, list[str]]:
    transitions: dict[str, list[str]] = {}
    for index, status in enumerate(OrderStatus.SEQUENCE):
        if status in OrderStatus.TERMINAL:
            transitions[status] = []
        else:
            transitions[status] = OrderStatus.SEQUENCE[index + 1:] + [OrderStatus.CANCELLED]
    transitions[OrderStatus.CANCELLED] = []
    return transitions


# Valid order status transitions (from -> [allowed to states]).
# Any later status in the sequence may be reached directly.
ORDER_TRANSITIONS: Final[dict[str, list[str]]] = _build_order_transitions()


class PaymentMethod:
    """Payment method constants."""

    CASH_ON_DELIVERY: Final[str] = "Cash on Delivery"
    ONLINE: Final[str] = "Online"

    ALL: Final[list[str]] = [CASH_ON_DELIVERY, ONLINE]


class MenuCategory:
    """Menu item category constants."""

    STARTERS: Final[str] = "Starters"
    MAIN_COURSE: Final[str] = "Main Course"
    DESSERTS: Final[str] = "Desserts"
    BEVERAGES: Final[str] = "Beverages"
    BREADS: Final[str] = "Breads"

    ALL: Final[list[str]] = [STARTERS, MAIN_COURSE, DESSERTS, BEVERAGES, BREADS]


class AssignmentOutcome:
    """Result of a single delivery assignment attempt."""

    ASSIGNED: Final[str] = "assigned"
    ALREADY_ASSIGNED: Final[str] = "already_assigned"
    NO_RESTAURANT_LOCATION: Final[str] = "no_restaurant_location"
    NO_CANDIDATE: Final[str] = "no_candidate"
    ERROR: Final[str] = "error"


# =============================================================================
# Validation Constants
# =============================================================================


class Limits:
    """Validation limits."""

    MIN_QUANTITY: Final[int] = 1
    MAX_QUANTITY: Final[int] = 99

    MIN_RATING: Final[int] = 1
    MAX_RATING: Final[int] = 5

    MAX_NAME_LENGTH: Final[int] = 200
    MAX_DESCRIPTION_LENGTH: Final[int] = 2000
    MAX_NOTES_LENGTH: Final[int] = 500
    MAX_REVIEW_LENGTH: Final[int] = 1000
    MAX_SEARCH_TERM_LENGTH: Final[int] = 100

    # Pagination defaults
    DEFAULT_PAGE_SIZE: Final[int] = 10
    MAX_PAGE_SIZE: Final[int] = 100
    SEARCH_RESULT_LIMIT: Final[int] = 10


# =============================================================================
# Error Messages
# =============================================================================


class ErrorMessages:
    """Standardized user-facing error messages."""

    NOT_AUTHENTICATED: Final[str] = "Not authenticated"
    INVALID_TOKEN: Final[str] = "Invalid token"
    TOKEN_EXPIRED: Final[str] = "Token expired"
    INSUFFICIENT_PERMISSIONS: Final[str] = "Insufficient permissions"
    INVALID_CREDENTIALS: Final[str] = "Invalid credentials"

    ACCOUNT_EXISTS: Final[str] = "An account with this email or phone already exists"
    NO_PENDING_REGISTRATION: Final[str] = "No pending registration found for this email"
    OTP_EXPIRED: Final[str] = "OTP has expired. Please request a new one"
    INVALID_OTP: Final[str] = "Invalid OTP"
    INVALID_OR_EXPIRED_OTP: Final[str] = "Invalid or expired OTP"
    OTP_SEND_FAILED: Final[str] = "Failed to send OTP email"

    # Uniform replies that never reveal whether an account exists
    PASSWORD_RESET_SENT: Final[str] = "If an account exists for this email, a password reset OTP has been sent"
    VERIFICATION_SENT: Final[str] = "If an account exists for this email, a verification OTP has been sent"

    RESTAURANT_CLOSED: Final[str] = "Restaurant is currently closed"
    BELOW_MIN_ORDER: Final[str] = "Minimum order amount is {min_order}"
    INVALID_STATUS: Final[str] = "Invalid order status"
    RATE_LIMIT_EXCEEDED: Final[str] = "Too many requests. Please try again later."
    VALIDATION_FAILED: Final[str] = "Validation failed"
    INTERNAL_ERROR: Final[str] = "Internal server error"


# =============================================================================
# Status Validation Functions
# =============================================================================


def validate_order_status(status: str) -> bool:
    """Validate that an order status is valid."""
    return status in OrderStatus.ALL


def validate_order_transition(current_status: str, new_status: str) -> bool:
    """
    Validate that an order status transition is allowed.

    Returns True if transition is valid, False otherwise.
    """
    return new_status in ORDER_TRANSITIONS.get(current_status, [])
