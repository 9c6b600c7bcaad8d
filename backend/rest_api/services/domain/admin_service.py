"""
Admin Service.

Platform-wide read models: dashboard totals, restaurants, orders and
partner accounts. Revenue excludes cancelled orders.
"""

from datetime import datetime, timedelta
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from rest_api.models import Customer, DeliveryPerson, Order, Restaurant, Vendor
from rest_api.routers._common.pagination import Pagination
from shared.config.constants import OrderStatus, Role
from shared.utils.exceptions import ValidationError
from shared.utils.otp import utcnow
from shared.utils.schemas import (
    AdminDashboardOutput,
    PaginationMeta,
    RestaurantOutput,
    UserSummaryOutput,
)

USER_ROLES = (Role.VENDOR.value, Role.DELIVERY.value)


class AdminService:
    """Read-only platform views for administrators."""

    def __init__(self, db: Session):
        self._db = db

    def _count(self, model, *criteria) -> int:
        return self._db.scalar(
            select(func.count(model.id)).where(model.is_active.is_(True), *criteria)
        ) or 0

    def _orders_since(self, since: datetime | None = None) -> tuple[int, float]:
        """(order count, revenue) for active orders created at or after `since`."""
        count_query = select(func.count(Order.id)).where(Order.is_active.is_(True))
        revenue_query = select(func.coalesce(func.sum(Order.total_amount), 0.0)).where(
            Order.is_active.is_(True),
            Order.status != OrderStatus.CANCELLED,
        )
        if since is not None:
            count_query = count_query.where(Order.created_at >= since)
            revenue_query = revenue_query.where(Order.created_at >= since)
        return self._db.scalar(count_query) or 0, round(float(self._db.scalar(revenue_query) or 0.0), 2)

    def get_dashboard(self) -> AdminDashboardOutput:
        now = utcnow()
        today = now.replace(hour=0, minute=0, second=0, microsecond=0)

        total_orders, total_revenue = self._orders_since()
        today_orders, today_revenue = self._orders_since(today)
        month_orders, month_revenue = self._orders_since(now - timedelta(days=30))

        status_counts = dict(
            self._db.execute(
                select(Order.status, func.count(Order.id))
                .where(Order.is_active.is_(True))
                .group_by(Order.status)
            ).all()
        )

        return AdminDashboardOutput(
            total_restaurants=self._count(Restaurant),
            active_restaurants=self._count(Restaurant, Restaurant.is_open.is_(True)),
            total_vendors=self._count(Vendor),
            total_delivery_persons=self._count(DeliveryPerson),
            available_delivery_persons=self._count(DeliveryPerson, DeliveryPerson.is_available.is_(True)),
            total_customers=self._count(Customer),
            total_orders=total_orders,
            total_revenue=total_revenue,
            today_orders=today_orders,
            today_revenue=today_revenue,
            month_orders=month_orders,
            month_revenue=month_revenue,
            order_status_counts={status: status_counts.get(status, 0) for status in OrderStatus.ALL},
        )

    def list_restaurants(self, pagination: Pagination) -> tuple[list[RestaurantOutput], PaginationMeta]:
        total = self._count(Restaurant)
        restaurants = self._db.scalars(
            select(Restaurant)
            .where(Restaurant.is_active.is_(True))
            .order_by(Restaurant.created_at.desc(), Restaurant.id.desc())
            .offset(pagination.offset)
            .limit(pagination.limit)
        ).all()
        return (
            [RestaurantOutput.model_validate(r, from_attributes=True) for r in restaurants],
            pagination.to_meta(total),
        )

    def list_users(
        self,
        pagination: Pagination,
        role: str | None = None,
    ) -> tuple[list[UserSummaryOutput], PaginationMeta]:
        """
        Vendors, couriers, or both (newest first) when no role is given.
        """
        if role is not None and role not in USER_ROLES:
            raise ValidationError(f"Invalid role filter: {role}. Expected one of {list(USER_ROLES)}")

        users: list[UserSummaryOutput] = []
        if role in (None, Role.VENDOR.value):
            vendors = self._db.scalars(
                select(Vendor).options(selectinload(Vendor.restaurant)).where(Vendor.is_active.is_(True))
            ).all()
            users.extend(self._vendor_summary(v) for v in vendors)
        if role in (None, Role.DELIVERY.value):
            couriers = self._db.scalars(
                select(DeliveryPerson).where(DeliveryPerson.is_active.is_(True))
            ).all()
            users.extend(self._courier_summary(d) for d in couriers)

        users.sort(key=lambda u: (u.created_at, u.id), reverse=True)
        page = users[pagination.offset:pagination.offset + pagination.limit]
        return page, pagination.to_meta(len(users))

    @staticmethod
    def _summary(account: Any, role: Role, details: dict[str, Any]) -> UserSummaryOutput:
        return UserSummaryOutput(
            id=account.id,
            role=role.value,
            name=account.name,
            email=account.email,
            phone=account.phone,
            is_active=account.is_active,
            last_login=account.last_login,
            created_at=account.created_at,
            details=details,
        )

    def _vendor_summary(self, vendor: Vendor) -> UserSummaryOutput:
        restaurant = vendor.restaurant
        return self._summary(vendor, Role.VENDOR, {
            "restaurant_id": restaurant.id if restaurant else None,
            "restaurant_name": restaurant.name if restaurant else None,
            "commission": vendor.commission,
        })

    def _courier_summary(self, person: DeliveryPerson) -> UserSummaryOutput:
        return self._summary(person, Role.DELIVERY, {
            "vehicle_type": person.vehicle_type,
            "vehicle_number": person.vehicle_number,
            "is_available": person.is_available,
            "total_deliveries": person.total_deliveries,
            "total_earnings": person.total_earnings,
        })
