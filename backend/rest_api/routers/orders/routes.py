"""
Orders router.

Placing an order is public. Everything else needs a session token:
listing is scoped to the caller, status changes need a vendor, courier
or admin, OTP verification a courier or admin, rating a customer or admin.
"""

from typing import Any

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from rest_api.routers._common import Pagination, get_pagination, ok
from rest_api.services.domain import OrderService
from rest_api.services.notifications import OTPSender, get_otp_sender
from shared.config.constants import ORDER_STATUS_ROLES, Role
from shared.infrastructure.db import get_db
from shared.security.auth import current_user_context, require_roles
from shared.utils.exceptions import ForbiddenError
from shared.utils.schemas import (
    AssignmentResultOutput,
    Envelope,
    OrderOutput,
    OrderStatusUpdateOutput,
    PlaceOrderOutput,
    PlaceOrderRequest,
    RateOrderRequest,
    RoleName,
    UpdateOrderStatusRequest,
    VerifyOrderOTPOutput,
    VerifyOrderOTPRequest,
)


router = APIRouter(prefix="/api/orders", tags=["orders"])


@router.post("", response_model=Envelope[PlaceOrderOutput], status_code=status.HTTP_201_CREATED)
def place_order(
    body: PlaceOrderRequest,
    db: Session = Depends(get_db),
    sender: OTPSender = Depends(get_otp_sender),
) -> Envelope[PlaceOrderOutput]:
    """
    Place an order against an open restaurant.

    The subtotal must reach the restaurant's minimum order. A 4-digit
    delivery code is emailed to the customer when an email is known.
    """
    result = OrderService(db, sender).place_order(body)
    return ok(result, message="Order placed successfully")


@router.get("", response_model=Envelope[list[OrderOutput]])
def list_orders(
    role: RoleName | None = Query(default=None, description="Scope role (admin only)"),
    user_id: int | None = Query(default=None, description="Scope account id (admin only)"),
    order_status: str | None = Query(default=None, alias="status"),
    pagination: Pagination = Depends(get_pagination),
    ctx: dict[str, Any] = Depends(current_user_context),
    db: Session = Depends(get_db),
) -> Envelope[list[OrderOutput]]:
    """
    Orders newest first.

    Non-admin callers always see their own orders; admins may scope the
    list to any account with role + user_id.
    """
    if ctx["role"] != Role.ADMIN.value:
        role, user_id = ctx["role"], ctx["id"]

    orders, meta = OrderService(db).list_orders(role, user_id, pagination, status=order_status)
    return ok(orders, pagination=meta)


@router.get("/{order_id}", response_model=Envelope[OrderOutput])
def get_order(
    order_id: int,
    ctx: dict[str, Any] = Depends(current_user_context),
    db: Session = Depends(get_db),
) -> Envelope[OrderOutput]:
    service = OrderService(db)
    order = service.get_order(order_id)
    service.ensure_visible_to(order, ctx)
    return ok(service.to_output(order))


@router.patch("/{order_id}/status", response_model=Envelope[OrderStatusUpdateOutput])
def update_order_status(
    order_id: int,
    body: UpdateOrderStatusRequest,
    ctx: dict[str, Any] = Depends(current_user_context),
    db: Session = Depends(get_db),
) -> Envelope[OrderStatusUpdateOutput]:
    """
    Move the order forward (any later status) or cancel it.

    Entering "Out for Delivery" without a courier assigns the nearest
    available one within range; if none is found the order waits for the
    next sweep.
    """
    require_roles(ctx, ORDER_STATUS_ROLES)
    service = OrderService(db)
    service.ensure_visible_to(service.get_order(order_id), ctx)

    order, assignment = service.update_status(order_id, body.status)
    result = OrderStatusUpdateOutput(
        order=service.to_output(order),
        assignment=AssignmentResultOutput.model_validate(assignment, from_attributes=True) if assignment else None,
    )
    return ok(result, message="Order status updated successfully")


@router.post("/{order_id}/verify-otp", response_model=Envelope[VerifyOrderOTPOutput])
def verify_order_otp(
    order_id: int,
    body: VerifyOrderOTPRequest,
    ctx: dict[str, Any] = Depends(current_user_context),
    db: Session = Depends(get_db),
) -> Envelope[VerifyOrderOTPOutput]:
    """Confirm delivery with the customer's code; credits the courier."""
    require_roles(ctx, [Role.DELIVERY, Role.ADMIN])
    service = OrderService(db)
    service.ensure_visible_to(service.get_order(order_id), ctx)

    result = service.verify_delivery_otp(order_id, body.otp)
    return ok(result, message="OTP verified successfully. Order marked as delivered.")


@router.patch("/{order_id}/cancel", response_model=Envelope[OrderOutput])
def cancel_order(
    order_id: int,
    ctx: dict[str, Any] = Depends(current_user_context),
    db: Session = Depends(get_db),
) -> Envelope[OrderOutput]:
    """Cancel any order that is not yet delivered or cancelled."""
    service = OrderService(db)
    service.ensure_visible_to(service.get_order(order_id), ctx)

    order = service.cancel_order(order_id)
    return ok(service.to_output(order), message="Order cancelled successfully")


@router.post("/{order_id}/rate", response_model=Envelope[OrderOutput])
def rate_order(
    order_id: int,
    body: RateOrderRequest,
    ctx: dict[str, Any] = Depends(current_user_context),
    db: Session = Depends(get_db),
) -> Envelope[OrderOutput]:
    """Rate a delivered order once (1-5)."""
    require_roles(ctx, [Role.CUSTOMER, Role.ADMIN])
    service = OrderService(db)
    order = service.get_order(order_id)
    if ctx["role"] == Role.CUSTOMER.value and not service.belongs_to_customer(order, ctx["id"]):
        raise ForbiddenError("rate this order", order_id=order_id, customer_id=ctx["id"])

    order = service.rate_order(order_id, body.rating, body.review)
    return ok(service.to_output(order), message="Thank you for your rating")
