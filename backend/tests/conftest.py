"""
Pytest configuration and fixtures for backend tests.
"""

import itertools
import os

# Settings are read at import time; configure the test environment first
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("ASSIGNMENT_SWEEP_INTERVAL_SECONDS", "0")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("SMTP_HOST", "")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from rest_api.main import app
from rest_api.models import (
    Admin,
    Base,
    Customer,
    DeliveryPerson,
    MenuItem,
    Order,
    OrderItem,
    Restaurant,
    Vendor,
)
from rest_api.services.auth import PendingRegistrationStore, get_pending_store
from rest_api.services.notifications import EmailDeliveryError, get_otp_sender
from shared.config.constants import MenuCategory, OrderStatus, Role
from shared.infrastructure.db import get_db
from shared.security.auth import sign_session_token
from shared.security.password import hash_password, hash_pin
from shared.utils.otp import otp_expiry


# SQLite in-memory database for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

TEST_PASSWORD = "testpass123"

_order_numbers = itertools.count(1)


class RecordingSender:
    """OTP sender that keeps every code instead of emailing it."""

    def __init__(self):
        self.sent: list[tuple[str, str, str]] = []
        self.fail = False

    def send_otp(self, to_email: str, code: str, purpose: str) -> None:
        if self.fail:
            raise EmailDeliveryError("SMTP unavailable")
        self.sent.append((to_email, code, purpose))

    def last_code(self, email: str, purpose: str | None = None) -> str | None:
        for to_email, code, sent_purpose in reversed(self.sent):
            if to_email == email and (purpose is None or sent_purpose == purpose):
                return code
        return None


@pytest.fixture(scope="function")
def db_session():
    """
    Create a fresh database session for each test.
    Uses SQLite in-memory for isolation.
    """
    Base.metadata.create_all(bind=engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def sender():
    return RecordingSender()


@pytest.fixture
def pending_store():
    return PendingRegistrationStore()


@pytest.fixture(scope="function")
def client(db_session, sender, pending_store):
    """
    Create a test client with database, OTP sender and pending store overrides.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_otp_sender] = lambda: sender
    app.dependency_overrides[get_pending_store] = lambda: pending_store

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def auth_header(account_id: int, role: Role) -> dict[str, str]:
    """Authorization header carrying a session token for the account."""
    return {"Authorization": f"Bearer {sign_session_token(account_id, role)}"}


# =============================================================================
# Entity factories
# =============================================================================


def make_vendor(db, email="vendor@test.com", phone="9000000001", **restaurant_fields):
    """Vendor with an open restaurant at (12.05, 77.0)."""
    vendor = Vendor(
        name="Test Vendor",
        email=email,
        phone=phone,
        password_hash=hash_password(TEST_PASSWORD),
        pin_hash=hash_pin("1234"),
        commission=10.0,
    )
    fields = {
        "name": "Test Dhaba",
        "cuisine": "North Indian",
        "min_order": 100.0,
        "delivery_fee": 20.0,
        "delivery_time_min": 30,
        "delivery_time_max": 45,
        "is_open": True,
        "latitude": 12.05,
        "longitude": 77.0,
    }
    fields.update(restaurant_fields)
    vendor.restaurant = Restaurant(**fields)
    db.add(vendor)
    db.commit()
    db.refresh(vendor)
    return vendor


def make_menu_item(db, restaurant, name="Paneer Tikka", price=150.0, **fields):
    item = MenuItem(
        restaurant_id=restaurant.id,
        name=name,
        price=price,
        category=fields.pop("category", MenuCategory.STARTERS),
        **fields,
    )
    db.add(item)
    db.commit()
    db.refresh(item)
    return item


def make_courier(db, email="courier@test.com", phone="9100000001", latitude=12.0, longitude=77.0, **fields):
    courier = DeliveryPerson(
        name=fields.pop("name", "Test Courier"),
        email=email,
        phone=phone,
        password_hash=hash_password(TEST_PASSWORD),
        vehicle_number="KA01AB1234",
        latitude=latitude,
        longitude=longitude,
        commission=fields.pop("commission", 10.0),
        is_available=fields.pop("is_available", True),
        **fields,
    )
    db.add(courier)
    db.commit()
    db.refresh(courier)
    return courier


def make_customer(db, email="customer@test.com", phone="9200000001"):
    customer = Customer(
        name="Test Customer",
        email=email,
        phone=phone,
        password_hash=hash_password(TEST_PASSWORD),
    )
    db.add(customer)
    db.commit()
    db.refresh(customer)
    return customer


def make_admin(db, email="admin@test.com"):
    admin = Admin(
        name="Test Admin",
        email=email,
        password_hash=hash_password(TEST_PASSWORD),
        permissions=["read", "write"],
    )
    db.add(admin)
    db.commit()
    db.refresh(admin)
    return admin


def make_order(db, restaurant, status=OrderStatus.PLACED, customer=None, total_amount=250.0, **fields):
    """Order row inserted directly, bypassing placement rules."""
    order = Order(
        order_number=fields.pop("order_number", f"ORDTEST{next(_order_numbers):06d}"),
        restaurant_id=restaurant.id,
        customer_id=customer.id if customer else None,
        customer_name="Test Customer",
        customer_phone="9200000001",
        customer_address="1 Test Street",
        customer_email=customer.email if customer else fields.pop("customer_email", None),
        subtotal=fields.pop("subtotal", 230.0),
        delivery_fee=fields.pop("delivery_fee", 20.0),
        total_amount=total_amount,
        status=status,
        otp_code=fields.pop("otp_code", "1234"),
        otp_expires_at=fields.pop("otp_expires_at", otp_expiry()),
        otp_verified=False,
        **fields,
    )
    order.items = [OrderItem(name="Paneer Tikka", price=115.0, quantity=2, total_price=230.0)]
    db.add(order)
    db.commit()
    db.refresh(order)
    return order


# =============================================================================
# Fixtures built on the factories
# =============================================================================


@pytest.fixture
def vendor(db_session):
    return make_vendor(db_session)


@pytest.fixture
def restaurant(vendor):
    return vendor.restaurant


@pytest.fixture
def courier(db_session):
    return make_courier(db_session)


@pytest.fixture
def customer(db_session):
    return make_customer(db_session)


@pytest.fixture
def admin(db_session):
    return make_admin(db_session)


@pytest.fixture
def admin_headers(admin):
    return auth_header(admin.id, Role.ADMIN)


@pytest.fixture
def vendor_headers(vendor):
    return auth_header(vendor.id, Role.VENDOR)


@pytest.fixture
def courier_headers(courier):
    return auth_header(courier.id, Role.DELIVERY)


@pytest.fixture
def customer_headers(customer):
    return auth_header(customer.id, Role.CUSTOMER)
