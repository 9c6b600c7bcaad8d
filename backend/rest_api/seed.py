"""
Seed data for development and testing.

seed() always makes sure the default admin exists; demo vendors,
restaurants, menus, couriers and a customer are only added when
SEED_SAMPLE_DATA is enabled. Both steps are idempotent.
"""

from sqlalchemy import select
from sqlalchemy.orm import Session

from rest_api.models import (
    Admin,
    Customer,
    CustomerAddress,
    DeliveryPerson,
    MenuItem,
    Restaurant,
    Vendor,
)
from shared.config.constants import ADMIN_PERMISSIONS, MenuCategory
from shared.config.logging import get_logger, mask_email
from shared.config.settings import settings
from shared.infrastructure.db import safe_commit
from shared.security.password import hash_password, hash_pin

logger = get_logger(__name__)


# Demo password for every sample account
SAMPLE_PASSWORD = "password123"

SAMPLE_RESTAURANTS = [
    {
        "vendor": {"name": "Ramesh Kumar", "email": "ramesh@gaonzaika.local", "phone": "9000000001"},
        "restaurant": {
            "name": "Desi Dhaba",
            "cuisine": "North Indian",
            "description": "Tandoor and curries from the village kitchen",
            "street": "12 MG Road",
            "city": "Bengaluru",
            "state": "Karnataka",
            "pincode": "560001",
            "latitude": 12.9750,
            "longitude": 77.6050,
        },
        "menu": [
            ("Paneer Tikka", MenuCategory.STARTERS, 180.0, True),
            ("Chicken Tikka", MenuCategory.STARTERS, 220.0, False),
            ("Dal Makhani", MenuCategory.MAIN_COURSE, 160.0, True),
            ("Butter Chicken", MenuCategory.MAIN_COURSE, 260.0, False),
            ("Butter Naan", MenuCategory.BREADS, 40.0, True),
            ("Gulab Jamun", MenuCategory.DESSERTS, 60.0, True),
            ("Sweet Lassi", MenuCategory.BEVERAGES, 70.0, True),
        ],
    },
    {
        "vendor": {"name": "Lakshmi Iyer", "email": "lakshmi@gaonzaika.local", "phone": "9000000002"},
        "restaurant": {
            "name": "Amma's Kitchen",
            "cuisine": "South Indian",
            "description": "Dosas, idlis and filter coffee",
            "street": "4 Church Street",
            "city": "Bengaluru",
            "state": "Karnataka",
            "pincode": "560025",
            "latitude": 12.9740,
            "longitude": 77.6070,
        },
        "menu": [
            ("Masala Dosa", MenuCategory.MAIN_COURSE, 90.0, True),
            ("Idli Vada", MenuCategory.STARTERS, 70.0, True),
            ("Curd Rice", MenuCategory.MAIN_COURSE, 80.0, True),
            ("Payasam", MenuCategory.DESSERTS, 60.0, True),
            ("Filter Coffee", MenuCategory.BEVERAGES, 30.0, True),
        ],
    },
]

SAMPLE_COURIERS = [
    {
        "name": "Suresh",
        "email": "suresh@gaonzaika.local",
        "phone": "9100000001",
        "vehicle_number": "KA01AB1234",
        "latitude": 12.9716,
        "longitude": 77.5946,
    },
    {
        "name": "Anil",
        "email": "anil@gaonzaika.local",
        "phone": "9100000002",
        "vehicle_number": "KA05CD5678",
        "latitude": 12.9352,
        "longitude": 77.6245,
    },
]


def seed_default_admin(db: Session) -> Admin:
    """Create the configured default admin when no account uses its email."""
    email = settings.default_admin_email.lower()
    admin = db.scalar(select(Admin).where(Admin.email == email))
    if admin is not None:
        return admin

    admin = Admin(
        name=settings.default_admin_name,
        email=email,
        password_hash=hash_password(settings.default_admin_password),
        permissions=list(ADMIN_PERMISSIONS),
        email_verified=True,
    )
    db.add(admin)
    safe_commit(db)
    logger.info("Default admin created", email=mask_email(email))
    return admin


def seed_sample_data(db: Session) -> None:
    """
    Demo vendors with restaurants and menus, couriers and one customer.
    Skipped when any vendor already exists.
    """
    if db.scalar(select(Vendor.id).limit(1)):
        logger.info("Sample data already seeded, skipping")
        return

    logger.info("Seeding sample data")
    password_hash = hash_password(SAMPLE_PASSWORD)

    for entry in SAMPLE_RESTAURANTS:
        vendor = Vendor(
            **entry["vendor"],
            password_hash=password_hash,
            pin_hash=hash_pin(settings.default_vendor_pin),
            commission=settings.default_vendor_commission,
            email_verified=True,
        )
        restaurant = Restaurant(
            **entry["restaurant"],
            phone=entry["vendor"]["phone"],
            email=entry["vendor"]["email"],
            delivery_time_min=settings.default_delivery_time_min,
            delivery_time_max=settings.default_delivery_time_max,
            min_order=settings.default_min_order,
            delivery_fee=settings.default_delivery_fee,
            is_open=True,
        )
        restaurant.compose_full_address()
        restaurant.menu_items = [
            MenuItem(name=name, category=category, price=price, is_veg=is_veg)
            for name, category, price, is_veg in entry["menu"]
        ]
        vendor.restaurant = restaurant
        db.add(vendor)

    for courier in SAMPLE_COURIERS:
        db.add(
            DeliveryPerson(
                **courier,
                password_hash=password_hash,
                pin_hash=hash_pin(settings.default_delivery_pin),
                commission=settings.default_delivery_commission,
                is_available=True,
                email_verified=True,
            )
        )

    customer = Customer(
        name="Priya Sharma",
        email="priya@gaonzaika.local",
        phone="9200000001",
        password_hash=password_hash,
        email_verified=True,
    )
    customer.addresses = [
        CustomerAddress(
            label="Home",
            address="221 Indiranagar 100ft Road, Bengaluru",
            latitude=12.9719,
            longitude=77.6412,
            is_default=True,
        )
    ]
    db.add(customer)

    safe_commit(db)
    logger.info(
        "Sample data seeded",
        restaurants=len(SAMPLE_RESTAURANTS),
        couriers=len(SAMPLE_COURIERS),
    )


def seed(db: Session, sample_data: bool | None = None) -> None:
    """
    Seed the database with initial data.
    Idempotent: only inserts if data doesn't exist.
    """
    seed_default_admin(db)
    if sample_data is None:
        sample_data = settings.seed_sample_data
    if sample_data:
        seed_sample_data(db)
