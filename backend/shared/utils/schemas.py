"""
Shared Pydantic schemas used across the application.
"""

from datetime import datetime
from typing import Any, Generic, Literal, TypeVar

from pydantic import BaseModel, EmailStr, Field, field_validator

from shared.config.constants import Limits, MenuCategory, PaymentMethod
from shared.utils.validators import validate_image_url, validate_phone


T = TypeVar("T")


# =============================================================================
# Common Types
# =============================================================================

RoleName = Literal["customer", "vendor", "delivery", "admin"]
RegistrationRole = Literal["customer", "vendor", "delivery"]
MenuCategoryName = Literal["Starters", "Main Course", "Desserts", "Beverages", "Breads"]


# =============================================================================
# Response Envelope
# =============================================================================


class ErrorDetail(BaseModel):
    """A single field-level error."""

    field: str | None = None
    message: str


class PaginationMeta(BaseModel):
    """Page-based pagination metadata."""

    page: int
    limit: int
    total: int
    pages: int


class Envelope(BaseModel, Generic[T]):
    """Uniform body for every API response."""

    success: bool = True
    message: str = "OK"
    data: T | None = None
    errors: list[ErrorDetail] | None = None
    pagination: PaginationMeta | None = None


class MessageOutput(BaseModel):
    """Body for endpoints that only confirm an action."""

    detail: str | None = None


# =============================================================================
# Authentication Schemas
# =============================================================================


class SendRegistrationOTPRequest(BaseModel):
    """Start self-registration for a customer, vendor or delivery person."""

    role: RegistrationRole
    name: str = Field(min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    email: EmailStr
    phone: str
    password: str = Field(min_length=6, max_length=128)
    # Vendor only
    restaurant_name: str | None = Field(default=None, max_length=Limits.MAX_NAME_LENGTH)
    cuisine: str | None = Field(default=None, max_length=100)
    street: str | None = None
    city: str | None = None
    state: str | None = None
    pincode: str | None = None
    # Delivery only
    vehicle_number: str | None = Field(default=None, max_length=20)
    vehicle_type: str | None = Field(default=None, max_length=30)

    @field_validator("phone")
    @classmethod
    def _phone(cls, value: str) -> str:
        return validate_phone(value)


class VerifyRegistrationOTPRequest(BaseModel):
    """Complete a pending registration."""

    email: EmailStr
    otp: str = Field(min_length=4, max_length=8)


class LoginRequest(BaseModel):
    """Email and password login body."""

    email: EmailStr
    password: str = Field(min_length=1)


class PinLoginRequest(BaseModel):
    """Short-PIN demo login."""

    role: str
    pin: str = Field(min_length=4, max_length=8)
    email: EmailStr | None = None


class AccountChallengeRequest(BaseModel):
    """Request a password-reset or email-verification code."""

    email: EmailStr
    role: RoleName = "customer"


class ResetPasswordRequest(BaseModel):
    """Set a new password using a reset code."""

    email: EmailStr
    role: RoleName = "customer"
    otp: str = Field(min_length=4, max_length=8)
    new_password: str = Field(min_length=6, max_length=128)


class VerifyEmailOTPRequest(BaseModel):
    """Confirm an email address using a verification code."""

    email: EmailStr
    role: RoleName = "customer"
    otp: str = Field(min_length=4, max_length=8)


class AccountOutput(BaseModel):
    """Public view of any account."""

    id: int
    role: RoleName
    name: str
    email: str
    phone: str | None = None
    email_verified: bool = False
    restaurant_id: int | None = None
    permissions: list[str] | None = None


class AuthOutput(BaseModel):
    """Session token plus the authenticated account."""

    token: str
    token_type: str = "Bearer"
    expires_in: int  # seconds
    user: AccountOutput


class RegistrationOTPOutput(BaseModel):
    """Returned after a registration code is sent."""

    email: str
    expires_at: datetime


# =============================================================================
# Order Schemas
# =============================================================================


class CustomerInfo(BaseModel):
    """Contact details copied onto the order."""

    name: str = Field(min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    phone: str = Field(min_length=1, max_length=20)
    address: str = Field(min_length=1, max_length=500)
    email: EmailStr | None = None


class OrderItemInput(BaseModel):
    """A line in a new order."""

    menu_item_id: int | None = None
    name: str = Field(min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    price: float = Field(ge=0)
    quantity: int = Field(ge=Limits.MIN_QUANTITY, le=Limits.MAX_QUANTITY)


class PlaceOrderRequest(BaseModel):
    """Request to place an order."""

    restaurant_id: int
    customer_id: int | None = None
    customer_info: CustomerInfo
    items: list[OrderItemInput] = Field(min_length=1)
    subtotal: float | None = Field(default=None, ge=0)
    delivery_fee: float | None = Field(default=None, ge=0)
    total_amount: float = Field(ge=0)
    notes: str | None = Field(default=None, max_length=Limits.MAX_NOTES_LENGTH)
    payment_method: str = PaymentMethod.CASH_ON_DELIVERY

    @field_validator("payment_method")
    @classmethod
    def _payment_method(cls, value: str) -> str:
        if value not in PaymentMethod.ALL:
            raise ValueError(f"payment_method must be one of {PaymentMethod.ALL}")
        return value


class PlaceOrderOutput(BaseModel):
    """Response after placing an order."""

    id: int
    order_number: str
    status: str
    total_amount: float
    estimated_delivery_time: datetime | None = None
    otp_expires_at: datetime | None = None
    # Only populated in debug mode
    otp: str | None = None


class OrderItemOutput(BaseModel):
    """Output for a single order line."""

    id: int
    menu_item_id: int | None = None
    name: str
    price: float
    quantity: int
    total_price: float


class OrderOutput(BaseModel):
    """Full order view."""

    id: int
    order_number: str
    restaurant_id: int
    restaurant_name: str | None = None
    customer_id: int | None = None
    customer_name: str
    customer_phone: str
    customer_address: str
    customer_email: str | None = None
    items: list[OrderItemOutput]
    subtotal: float
    delivery_fee: float
    total_amount: float
    notes: str | None = None
    payment_method: str
    status: str
    estimated_delivery_time: datetime | None = None
    otp_verified: bool
    delivery_person_id: int | None = None
    rating: int | None = None
    review: str | None = None
    created_at: datetime
    accepted_at: datetime | None = None
    delivered_at: datetime | None = None
    cancelled_at: datetime | None = None


class UpdateOrderStatusRequest(BaseModel):
    """Move an order to another status."""

    status: str


class VerifyOrderOTPRequest(BaseModel):
    """Delivery confirmation code (exactly 4 digits)."""

    otp: str = Field(pattern=r"^\d{4}$")


class RateOrderRequest(BaseModel):
    """Rate a delivered order."""

    rating: int = Field(ge=Limits.MIN_RATING, le=Limits.MAX_RATING)
    review: str | None = Field(default=None, max_length=Limits.MAX_REVIEW_LENGTH)


class VerifyOrderOTPOutput(BaseModel):
    """Result of a delivery confirmation."""

    order_id: int
    status: str
    delivery_person_id: int | None = None
    earnings_credited: float = 0.0


# =============================================================================
# Restaurant / Menu Schemas
# =============================================================================


class MenuItemOutput(BaseModel):
    """Output for a menu item."""

    id: int
    restaurant_id: int
    name: str
    description: str | None = None
    price: float
    category: str
    image: str | None = None
    is_veg: bool
    is_available: bool
    preparation_time: int


class MenuItemCreate(BaseModel):
    """Add a dish to the menu."""

    name: str = Field(min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    description: str | None = Field(default=None, max_length=Limits.MAX_DESCRIPTION_LENGTH)
    price: float = Field(ge=0)
    category: MenuCategoryName = MenuCategory.MAIN_COURSE  # type: ignore[assignment]
    image: str | None = None
    is_veg: bool = True
    is_available: bool = True
    preparation_time: int = Field(default=20, ge=1, le=240)

    @field_validator("image")
    @classmethod
    def _image(cls, value: str | None) -> str | None:
        return validate_image_url(value)


class MenuItemUpdate(BaseModel):
    """Partial update of a menu item."""

    name: str | None = Field(default=None, min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    description: str | None = Field(default=None, max_length=Limits.MAX_DESCRIPTION_LENGTH)
    price: float | None = Field(default=None, ge=0)
    category: MenuCategoryName | None = None
    image: str | None = None
    is_veg: bool | None = None
    is_available: bool | None = None
    preparation_time: int | None = Field(default=None, ge=1, le=240)

    @field_validator("image")
    @classmethod
    def _image(cls, value: str | None) -> str | None:
        return validate_image_url(value)


class RestaurantOutput(BaseModel):
    """Restaurant summary for listings."""

    id: int
    vendor_id: int | None = None
    name: str
    cuisine: str
    description: str | None = None
    image: str | None = None
    full_address: str | None = None
    city: str | None = None
    phone: str | None = None
    email: str | None = None
    rating: float
    total_ratings: int
    delivery_time_min: int
    delivery_time_max: int
    min_order: float
    delivery_fee: float
    is_open: bool
    is_active: bool
    latitude: float | None = None
    longitude: float | None = None


class RestaurantDetailOutput(RestaurantOutput):
    """Restaurant with its available menu."""

    menu: list[MenuItemOutput] = []


class RestaurantStatsOutput(BaseModel):
    """Public statistics for a restaurant."""

    restaurant_id: int
    rating: float
    total_ratings: int
    total_menu_items: int
    available_menu_items: int
    veg_items: int
    categories: list[str]
    delivered_orders: int


class RestaurantSettingsUpdate(BaseModel):
    """Vendor-editable restaurant settings."""

    name: str | None = Field(default=None, min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    cuisine: str | None = Field(default=None, max_length=100)
    description: str | None = Field(default=None, max_length=Limits.MAX_DESCRIPTION_LENGTH)
    image: str | None = None
    is_open: bool | None = None
    min_order: float | None = Field(default=None, ge=0)
    delivery_fee: float | None = Field(default=None, ge=0)
    delivery_time_min: int | None = Field(default=None, ge=1, le=240)
    delivery_time_max: int | None = Field(default=None, ge=1, le=240)
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)
    street: str | None = None
    city: str | None = None
    state: str | None = None
    pincode: str | None = None

    @field_validator("image")
    @classmethod
    def _image(cls, value: str | None) -> str | None:
        return validate_image_url(value)


# =============================================================================
# Vendor Schemas
# =============================================================================


class VendorProfileOutput(BaseModel):
    """Vendor profile with its restaurant."""

    id: int
    name: str
    email: str
    phone: str
    street: str | None = None
    city: str | None = None
    state: str | None = None
    pincode: str | None = None
    commission: float
    email_verified: bool
    last_login: datetime | None = None
    restaurant: RestaurantOutput | None = None


class VendorProfileUpdate(BaseModel):
    """Vendor-editable profile fields."""

    name: str | None = Field(default=None, min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    phone: str | None = None
    street: str | None = None
    city: str | None = None
    state: str | None = None
    pincode: str | None = None

    @field_validator("phone")
    @classmethod
    def _phone(cls, value: str | None) -> str | None:
        return validate_phone(value) if value is not None else None


class VendorDashboardOutput(BaseModel):
    """Order and revenue summary for a vendor's restaurant."""

    restaurant_id: int
    total_orders: int
    pending_orders: int
    completed_orders: int
    cancelled_orders: int
    total_revenue: float
    today_revenue: float
    week_revenue: float
    month_revenue: float
    average_rating: float
    total_ratings: int


# =============================================================================
# Delivery Schemas
# =============================================================================


class LocationUpdate(BaseModel):
    """Courier position in degrees."""

    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)


class AvailabilityUpdate(BaseModel):
    """Courier availability toggle."""

    is_available: bool


class DeliveryPersonOutput(BaseModel):
    """Courier view."""

    id: int
    name: str
    email: str
    phone: str
    vehicle_type: str
    vehicle_number: str
    is_active: bool
    is_available: bool
    latitude: float | None = None
    longitude: float | None = None
    location_updated_at: datetime | None = None
    commission: float
    total_earnings: float
    total_deliveries: int
    completed_deliveries: int


# =============================================================================
# Customer Schemas
# =============================================================================


class AddressCreate(BaseModel):
    """Save a delivery address."""

    label: str = Field(default="Home", min_length=1, max_length=50)
    address: str = Field(min_length=1, max_length=500)
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)
    is_default: bool = False


class AddressOutput(BaseModel):
    """A saved delivery address."""

    id: int
    label: str
    address: str
    latitude: float | None = None
    longitude: float | None = None
    is_default: bool


class CustomerProfileOutput(BaseModel):
    """Customer profile with saved addresses."""

    id: int
    name: str
    email: str
    phone: str
    email_verified: bool
    last_login: datetime | None = None
    addresses: list[AddressOutput]
    total_orders: int


# =============================================================================
# Admin Schemas
# =============================================================================


class AdminDashboardOutput(BaseModel):
    """Platform-wide counts and revenue."""

    total_restaurants: int
    active_restaurants: int
    total_vendors: int
    total_delivery_persons: int
    available_delivery_persons: int
    total_customers: int
    total_orders: int
    total_revenue: float
    today_orders: int
    today_revenue: float
    month_orders: int
    month_revenue: float
    order_status_counts: dict[str, int]


class UserSummaryOutput(BaseModel):
    """Vendor or courier row in the admin user list."""

    id: int
    role: RoleName
    name: str
    email: str
    phone: str | None = None
    is_active: bool
    last_login: datetime | None = None
    created_at: datetime
    details: dict[str, Any] = {}


# =============================================================================
# Assignment Schemas
# =============================================================================


class AssignmentResultOutput(BaseModel):
    """Outcome of one assignment attempt."""

    order_id: int
    outcome: str
    delivery_person_id: int | None = None
    distance_km: float | None = None


class SweepSummaryOutput(BaseModel):
    """Per-order outcomes of one assignment sweep."""

    scanned: int
    assigned: int
    results: list[AssignmentResultOutput]


class OrderStatusUpdateOutput(BaseModel):
    """Order after a status change, with the assignment attempt it triggered."""

    order: OrderOutput
    assignment: AssignmentResultOutput | None = None


class MenuOutput(BaseModel):
    """A restaurant's menu."""

    restaurant_id: int
    restaurant_name: str
    menu: list[MenuItemOutput]
