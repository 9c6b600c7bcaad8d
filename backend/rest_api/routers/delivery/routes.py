"""
Delivery partner router.
Own orders, location and availability updates, and delivery OTP checks.
"""

from typing import Any

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from rest_api.routers._common import Pagination, get_pagination, ok
from rest_api.services.domain import DeliveryService, OrderService
from shared.config.constants import Role
from shared.infrastructure.db import get_db
from shared.security.auth import current_user_context, require_account, require_roles
from shared.utils.schemas import (
    AvailabilityUpdate,
    DeliveryPersonOutput,
    Envelope,
    LocationUpdate,
    OrderOutput,
    VerifyOrderOTPOutput,
    VerifyOrderOTPRequest,
)


router = APIRouter(prefix="/api/delivery", tags=["delivery"])


@router.get("/{delivery_person_id}/profile", response_model=Envelope[DeliveryPersonOutput])
def get_profile(
    delivery_person_id: int,
    ctx: dict[str, Any] = Depends(current_user_context),
    db: Session = Depends(get_db),
) -> Envelope[DeliveryPersonOutput]:
    require_account(ctx, Role.DELIVERY, delivery_person_id)
    return ok(DeliveryService(db).get_profile(delivery_person_id))


@router.get("/{delivery_person_id}/orders", response_model=Envelope[list[OrderOutput]])
def list_assigned_orders(
    delivery_person_id: int,
    order_status: str | None = Query(default=None, alias="status"),
    pagination: Pagination = Depends(get_pagination),
    ctx: dict[str, Any] = Depends(current_user_context),
    db: Session = Depends(get_db),
) -> Envelope[list[OrderOutput]]:
    """Orders assigned to this courier, newest first."""
    require_account(ctx, Role.DELIVERY, delivery_person_id)
    orders, meta = OrderService(db).list_orders(
        Role.DELIVERY.value, delivery_person_id, pagination, status=order_status
    )
    return ok(orders, pagination=meta)


@router.patch("/{delivery_person_id}/location", response_model=Envelope[DeliveryPersonOutput])
def update_location(
    delivery_person_id: int,
    body: LocationUpdate,
    ctx: dict[str, Any] = Depends(current_user_context),
    db: Session = Depends(get_db),
) -> Envelope[DeliveryPersonOutput]:
    require_account(ctx, Role.DELIVERY, delivery_person_id)
    result = DeliveryService(db).update_location(delivery_person_id, body.latitude, body.longitude)
    return ok(result, message="Location updated successfully")


@router.patch("/{delivery_person_id}/availability", response_model=Envelope[DeliveryPersonOutput])
def update_availability(
    delivery_person_id: int,
    body: AvailabilityUpdate,
    ctx: dict[str, Any] = Depends(current_user_context),
    db: Session = Depends(get_db),
) -> Envelope[DeliveryPersonOutput]:
    require_account(ctx, Role.DELIVERY, delivery_person_id)
    result = DeliveryService(db).update_availability(delivery_person_id, body.is_available)
    return ok(result, message="Availability updated successfully")


@router.post("/{order_id}/verify-otp", response_model=Envelope[VerifyOrderOTPOutput])
def verify_delivery_otp(
    order_id: int,
    body: VerifyOrderOTPRequest,
    ctx: dict[str, Any] = Depends(current_user_context),
    db: Session = Depends(get_db),
) -> Envelope[VerifyOrderOTPOutput]:
    """Courier-side hand-over confirmation; same rules as /api/orders/{id}/verify-otp."""
    require_roles(ctx, [Role.DELIVERY, Role.ADMIN])
    service = OrderService(db)
    service.ensure_visible_to(service.get_order(order_id), ctx)

    result = service.verify_delivery_otp(order_id, body.otp)
    return ok(result, message="OTP verified, order marked as delivered")
