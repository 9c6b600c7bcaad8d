"""
Per-role account handlers.

Each role maps to one AccountHandler that knows how to find, create and
describe accounts of that role, so the auth workflows never branch on
role strings.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Generic, TypeVar

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from rest_api.models import Admin, Customer, DeliveryPerson, Restaurant, Vendor
from shared.config.constants import ADMIN_PERMISSIONS, Role
from shared.config.settings import settings
from shared.security.auth import sign_session_token
from shared.security.password import hash_pin
from shared.utils.exceptions import ValidationError
from shared.utils.schemas import AccountOutput, AuthOutput

if TYPE_CHECKING:
    from rest_api.services.auth.pending_store import PendingRegistration

AccountT = TypeVar("AccountT", Customer, Vendor, DeliveryPerson, Admin)


class AccountHandler(Generic[AccountT]):
    """Lookup, creation and presentation for one account role."""

    role: Role
    model: type[AccountT]

    def find_by_id(self, db: Session, account_id: int) -> AccountT | None:
        return db.scalar(select(self.model).where(self.model.id == account_id))

    def find_by_email(self, db: Session, email: str) -> AccountT | None:
        return db.scalar(select(self.model).where(self.model.email == email.lower()))

    def find_by_email_or_phone(self, db: Session, email: str, phone: str) -> AccountT | None:
        return db.scalar(
            select(self.model).where(
                or_(self.model.email == email.lower(), self.model.phone == phone)
            )
        )

    def required_fields(self) -> tuple[str, ...]:
        """Extra registration fields this role needs beyond name/email/phone/password."""
        return ()

    def create(self, db: Session, pending: "PendingRegistration") -> AccountT:
        """Build the account (and anything it owns) and add it to the session."""
        raise ValidationError(f"Self-registration is not available for role '{self.role.value}'")

    def update_last_login(self, account: AccountT) -> None:
        account.touch_login()

    def to_output(self, account: AccountT) -> AccountOutput:
        return AccountOutput(
            id=account.id,
            role=self.role.value,
            name=account.name,
            email=account.email,
            phone=account.phone,
            email_verified=account.email_verified,
        )


class CustomerHandler(AccountHandler[Customer]):
    role = Role.CUSTOMER
    model = Customer

    def create(self, db: Session, pending: "PendingRegistration") -> Customer:
        customer = Customer(
            name=pending.name,
            email=pending.email.lower(),
            phone=pending.phone,
            password_hash=pending.password_hash,
            email_verified=True,
        )
        db.add(customer)
        return customer


class VendorHandler(AccountHandler[Vendor]):
    role = Role.VENDOR
    model = Vendor

    def required_fields(self) -> tuple[str, ...]:
        return ("restaurant_name",)

    def create(self, db: Session, pending: "PendingRegistration") -> Vendor:
        """
        Create the vendor together with its restaurant.
        Both rows are added in one unit of work; the caller commits once.
        """
        extra = pending.extra
        vendor = Vendor(
            name=pending.name,
            email=pending.email.lower(),
            phone=pending.phone,
            password_hash=pending.password_hash,
            pin_hash=hash_pin(settings.default_vendor_pin),
            street=extra.get("street"),
            city=extra.get("city"),
            state=extra.get("state"),
            pincode=extra.get("pincode"),
            commission=settings.default_vendor_commission,
            email_verified=True,
        )
        restaurant = Restaurant(
            name=extra["restaurant_name"],
            cuisine=extra.get("cuisine") or "Mixed",
            street=extra.get("street"),
            city=extra.get("city"),
            state=extra.get("state"),
            pincode=extra.get("pincode"),
            phone=pending.phone,
            email=pending.email.lower(),
            delivery_time_min=settings.default_delivery_time_min,
            delivery_time_max=settings.default_delivery_time_max,
            min_order=settings.default_min_order,
            delivery_fee=settings.default_delivery_fee,
            is_open=True,
        )
        restaurant.compose_full_address()
        vendor.restaurant = restaurant
        db.add(vendor)
        return vendor

    def to_output(self, account: Vendor) -> AccountOutput:
        output = super().to_output(account)
        output.restaurant_id = account.restaurant.id if account.restaurant else None
        return output


class DeliveryHandler(AccountHandler[DeliveryPerson]):
    role = Role.DELIVERY
    model = DeliveryPerson

    def required_fields(self) -> tuple[str, ...]:
        return ("vehicle_number",)

    def create(self, db: Session, pending: "PendingRegistration") -> DeliveryPerson:
        extra = pending.extra
        person = DeliveryPerson(
            name=pending.name,
            email=pending.email.lower(),
            phone=pending.phone,
            password_hash=pending.password_hash,
            pin_hash=hash_pin(settings.default_delivery_pin),
            vehicle_type=extra.get("vehicle_type") or "Bike",
            vehicle_number=extra["vehicle_number"],
            commission=settings.default_delivery_commission,
            is_available=True,
            email_verified=True,
        )
        db.add(person)
        return person


class AdminHandler(AccountHandler[Admin]):
    role = Role.ADMIN
    model = Admin

    def find_by_email_or_phone(self, db: Session, email: str, phone: str) -> Admin | None:
        return self.find_by_email(db, email)

    def to_output(self, account: Admin) -> AccountOutput:
        output = super().to_output(account)
        output.permissions = list(account.permissions or ADMIN_PERMISSIONS)
        return output


ACCOUNT_HANDLERS: dict[Role, AccountHandler] = {
    Role.CUSTOMER: CustomerHandler(),
    Role.VENDOR: VendorHandler(),
    Role.DELIVERY: DeliveryHandler(),
    Role.ADMIN: AdminHandler(),
}


def get_handler(role: Role | str) -> AccountHandler:
    """Resolve the handler for a role value, rejecting unknown roles."""
    try:
        return ACCOUNT_HANDLERS[Role(role)]
    except ValueError:
        raise ValidationError(f"Invalid role: {role}", role=str(role)) from None


def issue_session(handler: AccountHandler, account) -> AuthOutput:
    """Session token plus account view returned by login and registration."""
    return AuthOutput(
        token=sign_session_token(account.id, handler.role),
        expires_in=settings.session_token_expire_days * 24 * 60 * 60,
        user=handler.to_output(account),
    )
