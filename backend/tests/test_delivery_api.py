"""
Tests for the delivery partner endpoints.
"""

from shared.config.constants import OrderStatus, Role
from tests.conftest import auth_header, make_courier, make_order


class TestDeliveryProfile:

    def test_profile(self, client, courier, courier_headers):
        response = client.get(f"/api/delivery/{courier.id}/profile", headers=courier_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["vehicle_number"] == "KA01AB1234"
        assert data["total_earnings"] == 0.0

    def test_other_courier_is_forbidden(self, client, db_session, courier):
        other = make_courier(db_session, email="c2@test.com", phone="9100000002")
        response = client.get(f"/api/delivery/{courier.id}/profile", headers=auth_header(other.id, Role.DELIVERY))
        assert response.status_code == 403


class TestLocationAndAvailability:

    def test_update_location(self, client, courier, courier_headers):
        response = client.patch(
            f"/api/delivery/{courier.id}/location",
            json={"latitude": 28.61, "longitude": 77.21},
            headers=courier_headers,
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert (data["latitude"], data["longitude"]) == (28.61, 77.21)
        assert data["location_updated_at"] is not None

    def test_location_out_of_range(self, client, courier, courier_headers):
        response = client.patch(
            f"/api/delivery/{courier.id}/location",
            json={"latitude": 91, "longitude": 0},
            headers=courier_headers,
        )
        assert response.status_code == 400

    def test_go_offline(self, client, db_session, courier, courier_headers):
        response = client.patch(
            f"/api/delivery/{courier.id}/availability", json={"is_available": False}, headers=courier_headers
        )

        assert response.status_code == 200
        db_session.refresh(courier)
        assert courier.is_available is False

    def test_offline_courier_is_not_assigned(self, client, db_session, restaurant, courier, courier_headers, vendor_headers):
        client.patch(f"/api/delivery/{courier.id}/availability", json={"is_available": False}, headers=courier_headers)
        order = make_order(db_session, restaurant, status=OrderStatus.PREPARING)

        response = client.patch(
            f"/api/orders/{order.id}/status",
            json={"status": OrderStatus.OUT_FOR_DELIVERY},
            headers=vendor_headers,
        )

        assert response.json()["data"]["order"]["delivery_person_id"] is None
        assert response.json()["data"]["assignment"]["outcome"] == "no_candidate"


class TestAssignedOrders:

    def test_lists_only_assigned_orders(self, client, db_session, restaurant, courier, courier_headers):
        mine = make_order(db_session, restaurant, status=OrderStatus.OUT_FOR_DELIVERY, delivery_person_id=courier.id)
        make_order(db_session, restaurant, status=OrderStatus.OUT_FOR_DELIVERY)

        response = client.get(f"/api/delivery/{courier.id}/orders", headers=courier_headers)

        assert [o["id"] for o in response.json()["data"]] == [mine.id]

    def test_verify_otp_from_delivery_route(self, client, db_session, restaurant, courier, courier_headers):
        order = make_order(
            db_session, restaurant, status=OrderStatus.OUT_FOR_DELIVERY,
            delivery_person_id=courier.id, otp_code="2468",
        )

        response = client.post(f"/api/delivery/{order.id}/verify-otp", json={"otp": "2468"}, headers=courier_headers)

        assert response.status_code == 200
        assert response.json()["data"]["status"] == OrderStatus.DELIVERED
