"""
SQLAlchemy ORM Models Package.

- base: Base class, AuditMixin, AccountMixin
- restaurant: Restaurant, MenuItem
- vendor: Vendor
- delivery: DeliveryPerson
- customer: Customer, CustomerAddress
- admin: Admin
- order: Order, OrderItem
"""

from .base import Base, AuditMixin, AccountMixin
from .restaurant import Restaurant, MenuItem
from .vendor import Vendor
from .delivery import DeliveryPerson
from .customer import Customer, CustomerAddress
from .admin import Admin
from .order import Order, OrderItem

__all__ = [
    "Base",
    "AuditMixin",
    "AccountMixin",
    "Restaurant",
    "MenuItem",
    "Vendor",
    "DeliveryPerson",
    "Customer",
    "CustomerAddress",
    "Admin",
    "Order",
    "OrderItem",
]
