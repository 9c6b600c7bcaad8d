"""
Order Domain Service.

Owns the order lifecycle:
    Order Placed -> Accepted -> Preparing -> Out for Delivery -> Delivered
with Cancelled reachable from any non-terminal state. Delivered and
Cancelled are final.

Placing an order issues a 4-digit delivery code; entering the
Delivered state through OTP verification credits the assigned courier.
Entering Out for Delivery without a courier triggers assignment.
"""

import random
import time
from datetime import timedelta
from typing import Any

from sqlalchemy import and_, func, or_, select
from sqlalchemy.orm import Session, selectinload

from rest_api.models import Customer, DeliveryPerson, Order, OrderItem, Restaurant
from rest_api.routers._common.pagination import Pagination
from rest_api.services.domain.assignment_service import AssignmentResult, AssignmentService
from rest_api.services.notifications.email import EmailDeliveryError, OTPSender
from shared.config.constants import (
    ErrorMessages,
    OrderStatus,
    Role,
    validate_order_status,
    validate_order_transition,
)
from shared.config.logging import get_logger, mask_email
from shared.config.settings import settings
from shared.infrastructure.db import safe_commit
from shared.utils.exceptions import (
    ForbiddenError,
    InvalidStateError,
    InvalidTransitionError,
    OrderNotFoundError,
    OTPError,
    RestaurantNotFoundError,
    ValidationError,
)
from shared.utils.otp import codes_match, generate_numeric_code, is_expired, otp_expiry, utcnow
from shared.utils.schemas import (
    OrderOutput,
    PaginationMeta,
    PlaceOrderOutput,
    PlaceOrderRequest,
    VerifyOrderOTPOutput,
)

logger = get_logger(__name__)


def generate_order_number() -> str:
    """Human-readable order number: ORD + epoch milliseconds + 3 random digits."""
    return f"ORD{int(time.time() * 1000)}{random.randint(0, 999):03d}"


class OrderService:
    """Order placement, listing and lifecycle transitions."""

    def __init__(self, db: Session, sender: OTPSender | None = None):
        self._db = db
        self._sender = sender

    # =========================================================================
    # Queries
    # =========================================================================

    def get_order(self, order_id: int) -> Order:
        order = self._db.scalar(
            select(Order)
            .options(selectinload(Order.items), selectinload(Order.restaurant))
            .where(Order.id == order_id, Order.is_active.is_(True))
        )
        if order is None:
            raise OrderNotFoundError(order_id)
        return order

    def list_orders(
        self,
        role: str | None,
        user_id: int | None,
        pagination: Pagination,
        status: str | None = None,
    ) -> tuple[list[OrderOutput], PaginationMeta]:
        """
        Paginated orders, newest first, scoped to the owner when a role and
        user id are given. Admin (or no scope) sees everything.
        """
        query = select(Order).where(Order.is_active.is_(True))
        if status:
            if not validate_order_status(status):
                raise ValidationError(ErrorMessages.INVALID_STATUS, status=status)
            query = query.where(Order.status == status)
        query = self._scope(query, role, user_id)

        total = self._db.scalar(select(func.count()).select_from(query.subquery())) or 0
        orders = self._db.scalars(
            query.options(selectinload(Order.items), selectinload(Order.restaurant))
            .order_by(Order.created_at.desc(), Order.id.desc())
            .offset(pagination.offset)
            .limit(pagination.limit)
        ).all()

        return [self.to_output(o) for o in orders], pagination.to_meta(total)

    def _scope(self, query, role: str | None, user_id: int | None):
        if not role or user_id is None or role == Role.ADMIN.value:
            return query
        if role == Role.VENDOR.value:
            restaurant_ids = select(Restaurant.id).where(Restaurant.vendor_id == user_id)
            return query.where(Order.restaurant_id.in_(restaurant_ids))
        if role == Role.DELIVERY.value:
            return query.where(Order.delivery_person_id == user_id)
        if role == Role.CUSTOMER.value:
            customer = self._db.get(Customer, user_id)
            if customer is None:
                return query.where(Order.customer_id == user_id)
            return query.where(
                or_(
                    Order.customer_id == user_id,
                    and_(Order.customer_id.is_(None), Order.customer_email == customer.email),
                )
            )
        raise ValidationError(f"Invalid role: {role}", role=role)

    def belongs_to_customer(self, order: Order, customer_id: int) -> bool:
        """Placed by the customer, or as a guest with the customer's email."""
        if order.customer_id == customer_id:
            return True
        if order.customer_id is not None or not order.customer_email:
            return False
        customer = self._db.get(Customer, customer_id)
        return customer is not None and order.customer_email == customer.email

    def ensure_visible_to(self, order: Order, ctx: dict[str, Any]) -> None:
        """Raise ForbiddenError unless the caller is a party to the order."""
        role, account_id = ctx["role"], ctx["id"]
        if role == Role.ADMIN.value:
            return
        if role == Role.VENDOR.value and order.restaurant and order.restaurant.vendor_id == account_id:
            return
        if role == Role.DELIVERY.value and order.delivery_person_id == account_id:
            return
        if role == Role.CUSTOMER.value and self.belongs_to_customer(order, account_id):
            return
        raise ForbiddenError("view this order", order_id=order.id, role=role, account_id=account_id)

    # =========================================================================
    # Placement
    # =========================================================================

    def place_order(self, body: PlaceOrderRequest) -> PlaceOrderOutput:
        restaurant = self._db.get(Restaurant, body.restaurant_id)
        if restaurant is None:
            raise RestaurantNotFoundError(body.restaurant_id)
        if not restaurant.is_open or not restaurant.is_active:
            raise ValidationError(ErrorMessages.RESTAURANT_CLOSED, restaurant_id=restaurant.id)

        line_totals = [item.price * item.quantity for item in body.items]
        subtotal = body.subtotal if body.subtotal is not None else sum(line_totals)
        if subtotal < restaurant.min_order:
            raise ValidationError(
                ErrorMessages.BELOW_MIN_ORDER.format(min_order=restaurant.min_order),
                restaurant_id=restaurant.id,
                subtotal=subtotal,
            )

        customer_email = body.customer_info.email
        if body.customer_id is not None:
            customer = self._db.get(Customer, body.customer_id)
            if customer is None:
                raise ValidationError("Customer not found", customer_id=body.customer_id)
            customer_email = customer.email

        now = utcnow()
        order = Order(
            order_number=generate_order_number(),
            restaurant_id=restaurant.id,
            customer_id=body.customer_id,
            customer_name=body.customer_info.name,
            customer_phone=body.customer_info.phone,
            customer_address=body.customer_info.address,
            customer_email=customer_email.lower() if customer_email else None,
            subtotal=subtotal,
            delivery_fee=body.delivery_fee if body.delivery_fee is not None else restaurant.delivery_fee,
            total_amount=body.total_amount,
            notes=body.notes,
            payment_method=body.payment_method,
            status=OrderStatus.PLACED,
            estimated_delivery_time=now + timedelta(minutes=restaurant.delivery_time_max),
            otp_code=generate_numeric_code(settings.order_otp_length),
            otp_expires_at=otp_expiry(),
            otp_verified=False,
        )
        order.items = [
            OrderItem(
                menu_item_id=item.menu_item_id,
                name=item.name,
                price=item.price,
                quantity=item.quantity,
                total_price=line_total,
            )
            for item, line_total in zip(body.items, line_totals)
        ]
        self._db.add(order)
        safe_commit(self._db)
        self._db.refresh(order)

        logger.info(
            "Order placed",
            order_id=order.id,
            order_number=order.order_number,
            restaurant_id=restaurant.id,
            total_amount=order.total_amount,
        )

        if order.customer_email:
            self._send_order_otp(order)

        return PlaceOrderOutput(
            id=order.id,
            order_number=order.order_number,
            status=order.status,
            total_amount=order.total_amount,
            estimated_delivery_time=order.estimated_delivery_time,
            otp_expires_at=order.otp_expires_at,
            otp=order.otp_code if settings.debug else None,
        )

    def _send_order_otp(self, order: Order) -> None:
        """Best effort: a failed email never fails the order."""
        if self._sender is None:
            return
        try:
            self._sender.send_otp(order.customer_email, order.otp_code, "order")
        except EmailDeliveryError as e:
            logger.error(
                "Failed to send order OTP email",
                order_id=order.id,
                email=mask_email(order.customer_email),
                error=str(e),
            )

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def update_status(self, order_id: int, new_status: str) -> tuple[Order, AssignmentResult | None]:
        """
        Move an order to `new_status`.

        Only forward moves (any later status) or Cancelled are allowed.
        Returns the order and, when it entered Out for Delivery without a
        courier, the assignment attempt.
        """
        if not validate_order_status(new_status):
            raise ValidationError(ErrorMessages.INVALID_STATUS, status=new_status)

        order = self.get_order(order_id)
        if not validate_order_transition(order.status, new_status):
            raise InvalidTransitionError("order", order.status, new_status, order_id=order.id)

        previous = order.status
        self._apply_status(order, new_status)

        assignment = None
        if new_status == OrderStatus.OUT_FOR_DELIVERY and order.delivery_person_id is None:
            assignment = AssignmentService(self._db).assign(order)

        safe_commit(self._db)
        self._db.refresh(order)

        logger.info(
            "Order status updated",
            order_id=order.id,
            from_status=previous,
            to_status=new_status,
            delivery_person_id=order.delivery_person_id,
        )
        return order, assignment

    def _apply_status(self, order: Order, new_status: str) -> None:
        now = utcnow()
        order.status = new_status
        if new_status == OrderStatus.ACCEPTED:
            order.accepted_at = now
        elif new_status == OrderStatus.DELIVERED:
            order.delivered_at = now
        elif new_status == OrderStatus.CANCELLED:
            order.cancelled_at = now

    def verify_delivery_otp(self, order_id: int, otp: str) -> VerifyOrderOTPOutput:
        """
        Confirm hand-over with the customer's code.

        On success the order is Delivered and the assigned courier earns
        total_amount * commission / 100. Any failure leaves the order as is.
        """
        order = self.get_order(order_id)

        if order.is_terminal:
            raise InvalidStateError("Order", order.status, OrderStatus.ACTIVE, order_id=order.id)
        if order.otp_verified or not order.otp_code:
            raise OTPError(ErrorMessages.INVALID_OR_EXPIRED_OTP, purpose="order", order_id=order.id)
        if not codes_match(order.otp_code, otp) or is_expired(order.otp_expires_at):
            raise OTPError(ErrorMessages.INVALID_OR_EXPIRED_OTP, purpose="order", order_id=order.id)

        order.otp_verified = True
        self._apply_status(order, OrderStatus.DELIVERED)

        earned = 0.0
        if order.delivery_person_id is not None:
            courier = self._db.get(DeliveryPerson, order.delivery_person_id)
            if courier is not None:
                earned = courier.credit_delivery(order.total_amount)

        safe_commit(self._db)

        logger.info(
            "Order delivered",
            order_id=order.id,
            delivery_person_id=order.delivery_person_id,
            earnings_credited=earned,
        )
        return VerifyOrderOTPOutput(
            order_id=order.id,
            status=order.status,
            delivery_person_id=order.delivery_person_id,
            earnings_credited=earned,
        )

    def cancel_order(self, order_id: int) -> Order:
        order = self.get_order(order_id)
        if order.is_terminal:
            raise InvalidTransitionError("order", order.status, OrderStatus.CANCELLED, order_id=order.id)

        self._apply_status(order, OrderStatus.CANCELLED)
        safe_commit(self._db)
        self._db.refresh(order)

        logger.info("Order cancelled", order_id=order.id)
        return order

    def rate_order(self, order_id: int, rating: int, review: str | None = None) -> Order:
        """Rate a delivered order once and fold it into the restaurant's mean."""
        order = self.get_order(order_id)
        if order.status != OrderStatus.DELIVERED:
            raise InvalidStateError("Order", order.status, [OrderStatus.DELIVERED], order_id=order.id)
        if order.rating is not None:
            raise ValidationError("Order has already been rated", order_id=order.id)

        order.rating = rating
        order.review = review
        restaurant = order.restaurant
        if restaurant is not None:
            restaurant.apply_rating(rating)

        safe_commit(self._db)
        self._db.refresh(order)

        logger.info(
            "Order rated",
            order_id=order.id,
            rating=rating,
            restaurant_id=order.restaurant_id,
        )
        return order

    # =========================================================================
    # Output
    # =========================================================================

    @staticmethod
    def to_output(order: Order) -> OrderOutput:
        return OrderOutput.model_validate(order, from_attributes=True)
