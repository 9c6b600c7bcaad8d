"""
Tests for nearest-courier delivery assignment.
"""

import pytest
from sqlalchemy import update

from rest_api.models import Order
from rest_api.services.domain import AssignmentService
from shared.config.constants import AssignmentOutcome, OrderStatus
from tests.conftest import make_courier, make_order, make_vendor


class TestFindCandidates:

    def test_only_couriers_within_radius_nearest_first(self, db_session):
        far_but_in_range = make_courier(db_session, email="a@test.com", phone="9100000011", latitude=12.1, longitude=77.0)
        nearest = make_courier(db_session, email="b@test.com", phone="9100000012", latitude=12.04, longitude=77.0)
        make_courier(db_session, email="c@test.com", phone="9100000013", latitude=13.0, longitude=77.0)

        candidates = AssignmentService(db_session).find_candidates(12.05, 77.0)

        assert [c.delivery_person.id for c in candidates] == [nearest.id, far_but_in_range.id]
        assert all(c.distance_km <= 10.0 for c in candidates)

    def test_unavailable_inactive_and_unlocated_couriers_are_skipped(self, db_session):
        make_courier(db_session, email="a@test.com", phone="9100000011", is_available=False)
        make_courier(db_session, email="b@test.com", phone="9100000012", is_active=False)
        make_courier(db_session, email="c@test.com", phone="9100000013", latitude=None, longitude=None)

        assert AssignmentService(db_session).find_candidates(12.0, 77.0) == []

    def test_ties_break_on_lowest_id(self, db_session):
        first = make_courier(db_session, email="a@test.com", phone="9100000011")
        make_courier(db_session, email="b@test.com", phone="9100000012")

        candidates = AssignmentService(db_session).find_candidates(12.0, 77.0)
        assert candidates[0].delivery_person.id == first.id

    def test_courier_across_the_antimeridian(self, db_session):
        across = make_courier(db_session, latitude=0.0, longitude=-179.99)

        candidates = AssignmentService(db_session).find_candidates(0.0, 179.99)

        assert [c.delivery_person.id for c in candidates] == [across.id]
        assert candidates[0].distance_km == pytest.approx(2.224, abs=0.01)

    def test_courier_near_the_pole(self, db_session):
        near_pole = make_courier(db_session, latitude=89.98, longitude=-120.0)

        candidates = AssignmentService(db_session).find_candidates(89.98, 60.0)

        assert [c.delivery_person.id for c in candidates] == [near_pole.id]

    def test_custom_radius(self, db_session):
        make_courier(db_session, latitude=12.0, longitude=77.0)
        assert AssignmentService(db_session, radius_km=5.0).find_candidates(12.05, 77.0) == []
        assert len(AssignmentService(db_session, radius_km=6.0).find_candidates(12.05, 77.0)) == 1


class TestAssign:

    def test_already_assigned_order_is_left_alone(self, db_session, restaurant, courier):
        order = make_order(
            db_session, restaurant,
            status=OrderStatus.OUT_FOR_DELIVERY,
            delivery_person_id=courier.id,
        )
        result = AssignmentService(db_session).assign(order)
        assert result.outcome == AssignmentOutcome.ALREADY_ASSIGNED
        assert result.delivery_person_id == courier.id

    def test_restaurant_without_location_is_skipped(self, db_session, courier):
        vendor = make_vendor(db_session, latitude=None, longitude=None)
        order = make_order(db_session, vendor.restaurant, status=OrderStatus.OUT_FOR_DELIVERY)

        result = AssignmentService(db_session).assign(order)
        assert result.outcome == AssignmentOutcome.NO_RESTAURANT_LOCATION

    def test_claim_loses_to_concurrent_assignment(self, db_session, restaurant):
        winner = make_courier(db_session, email="a@test.com", phone="9100000011", latitude=13.0)
        make_courier(db_session, email="b@test.com", phone="9100000012")
        order = make_order(db_session, restaurant, status=OrderStatus.OUT_FOR_DELIVERY)

        # Another worker claims the order after this one loaded it
        db_session.execute(
            update(Order).where(Order.id == order.id).values(delivery_person_id=winner.id)
            .execution_options(synchronize_session=False)
        )

        result = AssignmentService(db_session).assign(order)

        assert result.outcome == AssignmentOutcome.ALREADY_ASSIGNED
        assert order.delivery_person_id == winner.id


class TestSweep:

    def test_sweep_assigns_in_range_and_skips_out_of_range(self, db_session, restaurant):
        """Courier 5.6 km away is assigned; one 106 km away never is."""
        far_vendor = make_vendor(
            db_session, email="far@test.com", phone="9000000002", name="Far Dhaba",
            latitude=14.0, longitude=77.0,
        )
        courier = make_courier(db_session, latitude=12.0, longitude=77.0)
        make_courier(db_session, email="x@test.com", phone="9100000099", latitude=13.0, longitude=77.0, is_available=False)

        near_order = make_order(db_session, restaurant, status=OrderStatus.OUT_FOR_DELIVERY)
        far_order = make_order(db_session, far_vendor.restaurant, status=OrderStatus.OUT_FOR_DELIVERY)
        make_order(db_session, restaurant, status=OrderStatus.PREPARING)

        summary = AssignmentService(db_session).sweep()

        assert summary.scanned == 2
        outcomes = {r.order_id: r for r in summary.results}
        assert outcomes[near_order.id].outcome == AssignmentOutcome.ASSIGNED
        assert outcomes[near_order.id].delivery_person_id == courier.id
        assert outcomes[near_order.id].distance_km == pytest.approx(5.56, abs=0.01)
        assert outcomes[far_order.id].outcome == AssignmentOutcome.NO_CANDIDATE

        db_session.refresh(near_order)
        db_session.refresh(far_order)
        assert near_order.delivery_person_id == courier.id
        assert near_order.assigned_at is not None
        assert far_order.delivery_person_id is None

    def test_courier_out_of_range_is_excluded(self, db_session, restaurant):
        make_courier(db_session, latitude=13.0, longitude=77.0)
        order = make_order(db_session, restaurant, status=OrderStatus.OUT_FOR_DELIVERY)

        summary = AssignmentService(db_session).sweep()

        assert summary.count(AssignmentOutcome.NO_CANDIDATE) == 1
        db_session.refresh(order)
        assert order.delivery_person_id is None

    def test_sweep_ignores_other_statuses_and_assigned_orders(self, db_session, restaurant, courier):
        make_order(db_session, restaurant, status=OrderStatus.PLACED)
        make_order(db_session, restaurant, status=OrderStatus.DELIVERED)
        make_order(db_session, restaurant, status=OrderStatus.OUT_FOR_DELIVERY, delivery_person_id=courier.id)

        assert AssignmentService(db_session).sweep().scanned == 0

    def test_one_courier_may_take_several_orders(self, db_session, restaurant, courier):
        first = make_order(db_session, restaurant, status=OrderStatus.OUT_FOR_DELIVERY)
        second = make_order(db_session, restaurant, status=OrderStatus.OUT_FOR_DELIVERY)

        summary = AssignmentService(db_session).sweep()

        assert summary.count(AssignmentOutcome.ASSIGNED) == 2
        assert {r.delivery_person_id for r in summary.results} == {courier.id}
        assert {r.order_id for r in summary.results} == {first.id, second.id}
