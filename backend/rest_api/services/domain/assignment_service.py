"""
Delivery Assignment Domain Service.

One policy for both entry points (status change and periodic sweep):
candidates are active, available couriers with a known location within
delivery_radius_km of the restaurant, ranked by great-circle distance;
the nearest one wins.

Assignment is a claim: the order row is only updated while it still has
no courier, so two concurrent attempts can never overwrite each other.
No candidate is a soft failure; the order stays queued for the next sweep.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone

from sqlalchemy import or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from rest_api.models import DeliveryPerson, Order
from shared.config.constants import AssignmentOutcome, OrderStatus
from shared.config.logging import get_logger
from shared.config.settings import settings
from shared.infrastructure.db import safe_commit
from shared.utils.geo import bounding_box, haversine_km, longitude_ranges

logger = get_logger(__name__)


@dataclass
class Candidate:
    delivery_person: DeliveryPerson
    distance_km: float


@dataclass
class AssignmentResult:
    order_id: int
    outcome: str
    delivery_person_id: int | None = None
    distance_km: float | None = None

    @property
    def assigned(self) -> bool:
        return self.outcome == AssignmentOutcome.ASSIGNED


@dataclass
class SweepSummary:
    results: list[AssignmentResult] = field(default_factory=list)

    @property
    def scanned(self) -> int:
        return len(self.results)

    def count(self, outcome: str) -> int:
        return sum(1 for r in self.results if r.outcome == outcome)


class AssignmentService:
    """Nearest-available courier assignment."""

    def __init__(self, db: Session, radius_km: float | None = None):
        self._db = db
        self._radius_km = settings.delivery_radius_km if radius_km is None else radius_km

    def find_candidates(self, latitude: float, longitude: float) -> list[Candidate]:
        """
        Dispatchable couriers within the radius of a point, nearest first.

        A bounding-box query narrows the rows; Haversine decides.
        """
        min_lat, max_lat, min_lon, max_lon = bounding_box(latitude, longitude, self._radius_km)
        lon_filter = or_(
            *(DeliveryPerson.longitude.between(lo, hi) for lo, hi in longitude_ranges(min_lon, max_lon))
        )
        rows = self._db.scalars(
            select(DeliveryPerson).where(
                DeliveryPerson.is_active.is_(True),
                DeliveryPerson.is_available.is_(True),
                DeliveryPerson.latitude.is_not(None),
                DeliveryPerson.longitude.is_not(None),
                DeliveryPerson.latitude.between(min_lat, max_lat),
                lon_filter,
            )
        ).all()

        candidates = []
        for person in rows:
            distance = haversine_km(latitude, longitude, person.latitude, person.longitude)
            if distance <= self._radius_km:
                candidates.append(Candidate(person, distance))
        candidates.sort(key=lambda c: (c.distance_km, c.delivery_person.id))
        return candidates

    def assign(self, order: Order) -> AssignmentResult:
        """
        Try to give `order` its nearest courier. Does not commit.
        """
        if order.delivery_person_id is not None:
            return AssignmentResult(order.id, AssignmentOutcome.ALREADY_ASSIGNED, order.delivery_person_id)

        restaurant = order.restaurant
        if restaurant is None or not restaurant.has_location:
            logger.warning(
                "Assignment skipped: restaurant has no location",
                order_id=order.id,
                restaurant_id=order.restaurant_id,
            )
            return AssignmentResult(order.id, AssignmentOutcome.NO_RESTAURANT_LOCATION)

        candidates = self.find_candidates(restaurant.latitude, restaurant.longitude)
        if not candidates:
            logger.info(
                "Assignment deferred: no courier in range",
                order_id=order.id,
                restaurant_id=restaurant.id,
                radius_km=self._radius_km,
            )
            return AssignmentResult(order.id, AssignmentOutcome.NO_CANDIDATE)

        best = candidates[0]
        if not self._claim(order, best.delivery_person.id):
            logger.info("Assignment lost race: order already claimed", order_id=order.id)
            return AssignmentResult(order.id, AssignmentOutcome.ALREADY_ASSIGNED, order.delivery_person_id)

        logger.info(
            "Delivery person assigned",
            order_id=order.id,
            delivery_person_id=best.delivery_person.id,
            distance_km=round(best.distance_km, 3),
        )
        return AssignmentResult(
            order.id,
            AssignmentOutcome.ASSIGNED,
            best.delivery_person.id,
            round(best.distance_km, 3),
        )

    def _claim(self, order: Order, delivery_person_id: int) -> bool:
        """Conditional update: set the courier only while the order has none."""
        self._db.flush()
        now = datetime.now(timezone.utc)
        result = self._db.execute(
            update(Order)
            .where(Order.id == order.id, Order.delivery_person_id.is_(None))
            .values(delivery_person_id=delivery_person_id, assigned_at=now)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 1:
            order.delivery_person_id = delivery_person_id
            order.assigned_at = now
            return True
        self._db.refresh(order, ["delivery_person_id", "assigned_at"])
        return False

    def sweep(self) -> SweepSummary:
        """
        Assign every Out for Delivery order that has no courier yet.
        Each order commits on its own so one failure does not undo the rest.
        """
        order_ids = self._db.scalars(
            select(Order.id)
            .where(
                Order.status == OrderStatus.OUT_FOR_DELIVERY,
                Order.delivery_person_id.is_(None),
                Order.is_active.is_(True),
            )
            .order_by(Order.created_at.asc(), Order.id.asc())
        ).all()

        summary = SweepSummary()
        for order_id in order_ids:
            order = self._db.get(Order, order_id)
            if order is None:
                continue
            try:
                result = self.assign(order)
                safe_commit(self._db)
            except SQLAlchemyError as e:
                self._db.rollback()
                logger.error("Assignment failed", order_id=order_id, error=str(e), exc_info=True)
                result = AssignmentResult(order_id, AssignmentOutcome.ERROR)
            summary.results.append(result)

        logger.info(
            "Assignment sweep finished",
            scanned=summary.scanned,
            assigned=summary.count(AssignmentOutcome.ASSIGNED),
            no_candidate=summary.count(AssignmentOutcome.NO_CANDIDATE),
            no_restaurant_location=summary.count(AssignmentOutcome.NO_RESTAURANT_LOCATION),
        )
        return summary
