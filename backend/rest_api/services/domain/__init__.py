"""
Domain Services - application layer.

Structure:
    Router (thin controller)
        ↓
    Service (business logic)  ← YOU ARE HERE
        ↓
    Model (entity)

Usage:
    from rest_api.services.domain import OrderService

    # In router
    service = OrderService(db, sender)
    order = service.place_order(body)
"""

from .assignment_service import AssignmentResult, AssignmentService, SweepSummary
from .order_service import OrderService, generate_order_number
from .restaurant_service import RestaurantService
from .vendor_service import VendorService
from .delivery_service import DeliveryService
from .customer_service import CustomerService
from .admin_service import AdminService

__all__ = [
    # Lifecycle
    "OrderService",
    "generate_order_number",
    # Assignment
    "AssignmentService",
    "AssignmentResult",
    "SweepSummary",
    # Surfaces
    "RestaurantService",
    "VendorService",
    "DeliveryService",
    "CustomerService",
    "AdminService",
]
