"""
Tests for the admin endpoints.
"""

from shared.config.constants import OrderStatus
from tests.conftest import make_courier, make_order, make_vendor


class TestAdminAccess:

    def test_requires_token(self, client):
        assert client.get("/api/admin/dashboard").status_code == 401

    def test_non_admin_is_forbidden(self, client, vendor_headers, customer_headers, courier_headers):
        for headers in (vendor_headers, customer_headers, courier_headers):
            assert client.get("/api/admin/dashboard", headers=headers).status_code == 403


class TestDashboard:

    def test_revenue_excludes_cancelled_orders(self, client, db_session, restaurant, customer, courier, admin_headers):
        make_order(db_session, restaurant, status=OrderStatus.DELIVERED, total_amount=300.0)
        make_order(db_session, restaurant, status=OrderStatus.PLACED, total_amount=150.0)
        make_order(db_session, restaurant, status=OrderStatus.CANCELLED, total_amount=1000.0)

        response = client.get("/api/admin/dashboard", headers=admin_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["total_orders"] == 3
        assert data["total_revenue"] == 450.0
        assert data["total_restaurants"] == 1
        assert data["total_customers"] == 1
        assert data["total_delivery_persons"] == 1
        assert data["available_delivery_persons"] == 1
        assert data["order_status_counts"][OrderStatus.CANCELLED] == 1
        assert data["order_status_counts"][OrderStatus.PREPARING] == 0


class TestListings:

    def test_restaurants(self, client, db_session, restaurant, admin_headers):
        make_vendor(db_session, email="v2@test.com", phone="9000000002", name="Second")

        response = client.get("/api/admin/restaurants", params={"limit": 1}, headers=admin_headers)

        body = response.json()
        assert len(body["data"]) == 1
        assert body["pagination"]["total"] == 2

    def test_orders_filtered_by_status(self, client, db_session, restaurant, admin_headers):
        make_order(db_session, restaurant)
        delivered = make_order(db_session, restaurant, status=OrderStatus.DELIVERED)

        response = client.get("/api/admin/orders", params={"status": OrderStatus.DELIVERED}, headers=admin_headers)

        assert [o["id"] for o in response.json()["data"]] == [delivered.id]

    def test_users_filtered_by_role(self, client, vendor, courier, admin_headers):
        couriers = client.get("/api/admin/users", params={"role": "delivery"}, headers=admin_headers).json()["data"]
        everyone = client.get("/api/admin/users", headers=admin_headers).json()["data"]

        assert [(u["role"], u["id"]) for u in couriers] == [("delivery", courier.id)]
        assert {u["role"] for u in everyone} == {"vendor", "delivery"}
        vendor_row = next(u for u in everyone if u["role"] == "vendor")
        assert vendor_row["details"]["restaurant_id"] == vendor.restaurant.id

    def test_users_invalid_role(self, client, admin_headers):
        response = client.get("/api/admin/users", params={"role": "customer"}, headers=admin_headers)
        assert response.status_code == 400


class TestSweep:

    def test_sweep_assigns_waiting_orders(self, client, db_session, restaurant, admin_headers):
        waiting = make_order(db_session, restaurant, status=OrderStatus.OUT_FOR_DELIVERY)
        courier = make_courier(db_session)

        response = client.post("/api/admin/assignments/sweep", headers=admin_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["scanned"] == 1
        assert data["assigned"] == 1
        assert data["results"][0]["order_id"] == waiting.id
        assert data["results"][0]["delivery_person_id"] == courier.id

    def test_sweep_with_nothing_to_do(self, client, admin_headers):
        response = client.post("/api/admin/assignments/sweep", headers=admin_headers)
        assert response.json()["data"] == {"scanned": 0, "assigned": 0, "results": []}
