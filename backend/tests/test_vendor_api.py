"""
Tests for the vendor endpoints: profile, restaurant settings, menu and dashboard.
"""

from rest_api.models import MenuItem
from shared.config.constants import MenuCategory, OrderStatus, Role
from tests.conftest import auth_header, make_menu_item, make_order, make_vendor


class TestProfile:

    def test_get_profile(self, client, vendor, vendor_headers):
        response = client.get(f"/api/vendor/{vendor.id}/profile", headers=vendor_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["email"] == vendor.email
        assert data["restaurant"]["id"] == vendor.restaurant.id

    def test_other_vendor_is_forbidden(self, client, db_session, vendor):
        other = make_vendor(db_session, email="v2@test.com", phone="9000000002")
        response = client.get(f"/api/vendor/{vendor.id}/profile", headers=auth_header(other.id, Role.VENDOR))
        assert response.status_code == 403

    def test_customer_token_is_forbidden(self, client, vendor, customer_headers):
        response = client.get(f"/api/vendor/{vendor.id}/profile", headers=customer_headers)
        assert response.status_code == 403

    def test_admin_passes_ownership_check(self, client, vendor, admin_headers):
        response = client.get(f"/api/vendor/{vendor.id}/profile", headers=admin_headers)
        assert response.status_code == 200

    def test_update_profile(self, client, vendor, vendor_headers):
        response = client.put(
            f"/api/vendor/{vendor.id}/profile",
            json={"name": "Renamed", "city": "Pune"},
            headers=vendor_headers,
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["name"] == "Renamed"
        assert data["city"] == "Pune"
        assert data["email"] == vendor.email

    def test_update_profile_rejects_bad_phone(self, client, vendor, vendor_headers):
        response = client.put(f"/api/vendor/{vendor.id}/profile", json={"phone": "abc"}, headers=vendor_headers)
        assert response.status_code == 400


class TestRestaurantSettings:

    def test_close_restaurant(self, client, vendor, vendor_headers):
        response = client.patch(f"/api/vendor/{vendor.id}/restaurant", json={"is_open": False}, headers=vendor_headers)

        assert response.status_code == 200
        assert response.json()["data"]["is_open"] is False

    def test_location_needs_both_coordinates(self, client, vendor, vendor_headers):
        response = client.patch(f"/api/vendor/{vendor.id}/restaurant", json={"latitude": 13.0}, headers=vendor_headers)
        assert response.status_code == 400

    def test_update_location(self, client, vendor, vendor_headers):
        response = client.patch(
            f"/api/vendor/{vendor.id}/restaurant",
            json={"latitude": 13.0, "longitude": 77.5},
            headers=vendor_headers,
        )
        data = response.json()["data"]
        assert (data["latitude"], data["longitude"]) == (13.0, 77.5)

    def test_delivery_window_must_be_ordered(self, client, vendor, vendor_headers):
        response = client.patch(
            f"/api/vendor/{vendor.id}/restaurant", json={"delivery_time_min": 60}, headers=vendor_headers
        )
        assert response.status_code == 400
        assert "delivery_time_min" in response.json()["message"]

    def test_address_recomposes_full_address(self, client, vendor, vendor_headers):
        response = client.patch(
            f"/api/vendor/{vendor.id}/restaurant",
            json={"street": "5 MG Road", "city": "Bengaluru", "state": "KA", "pincode": "560001"},
            headers=vendor_headers,
        )
        assert response.json()["data"]["full_address"] == "5 MG Road, Bengaluru, KA - 560001"


class TestMenu:

    def test_public_menu_includes_unavailable_items(self, client, db_session, vendor, restaurant):
        make_menu_item(db_session, restaurant)
        make_menu_item(db_session, restaurant, name="Sold Out", is_available=False)

        response = client.get(f"/api/vendor/{vendor.id}/menu")

        assert response.status_code == 200
        assert len(response.json()["data"]["menu"]) == 2

    def test_add_menu_item(self, client, vendor, vendor_headers):
        response = client.post(
            f"/api/vendor/{vendor.id}/menu",
            json={"name": "Gulab Jamun", "price": 60, "category": MenuCategory.DESSERTS},
            headers=vendor_headers,
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["restaurant_id"] == vendor.restaurant.id
        assert data["is_veg"] is True
        assert data["is_available"] is True

    def test_unknown_category_is_rejected(self, client, vendor, vendor_headers):
        response = client.post(
            f"/api/vendor/{vendor.id}/menu",
            json={"name": "Mystery", "price": 60, "category": "Snacks"},
            headers=vendor_headers,
        )
        assert response.status_code == 400

    def test_update_menu_item(self, client, db_session, vendor, restaurant, vendor_headers):
        item = make_menu_item(db_session, restaurant)

        response = client.put(
            f"/api/vendor/{vendor.id}/menu/{item.id}",
            json={"price": 175.0, "is_available": False},
            headers=vendor_headers,
        )

        data = response.json()["data"]
        assert data["price"] == 175.0
        assert data["is_available"] is False
        assert data["name"] == item.name

    def test_cannot_edit_other_restaurants_item(self, client, db_session, vendor, vendor_headers):
        other = make_vendor(db_session, email="v2@test.com", phone="9000000002")
        item = make_menu_item(db_session, other.restaurant)

        response = client.put(
            f"/api/vendor/{vendor.id}/menu/{item.id}", json={"price": 1.0}, headers=vendor_headers
        )

        assert response.status_code == 404

    def test_delete_menu_item(self, client, db_session, vendor, restaurant, vendor_headers):
        item = make_menu_item(db_session, restaurant)
        item_id = item.id

        response = client.delete(f"/api/vendor/{vendor.id}/menu/{item_id}", headers=vendor_headers)

        assert response.status_code == 200
        db_session.expire_all()
        assert db_session.get(MenuItem, item_id) is None

    def test_menu_changes_need_a_token(self, client, vendor):
        response = client.post(f"/api/vendor/{vendor.id}/menu", json={"name": "X", "price": 1})
        assert response.status_code == 401


class TestDashboard:

    def test_dashboard_counts_and_revenue(self, client, db_session, vendor, restaurant, vendor_headers):
        make_order(db_session, restaurant, status=OrderStatus.PLACED, total_amount=100.0)
        make_order(db_session, restaurant, status=OrderStatus.DELIVERED, total_amount=200.0)
        make_order(db_session, restaurant, status=OrderStatus.CANCELLED, total_amount=400.0)

        response = client.get(f"/api/vendor/{vendor.id}/dashboard", headers=vendor_headers)

        data = response.json()["data"]
        assert data["total_orders"] == 3
        assert data["pending_orders"] == 1
        assert data["completed_orders"] == 1
        assert data["cancelled_orders"] == 1
        assert data["total_revenue"] == 300.0

    def test_vendor_orders(self, client, db_session, vendor, restaurant, vendor_headers):
        order = make_order(db_session, restaurant)

        response = client.get(f"/api/vendor/{vendor.id}/orders", headers=vendor_headers)

        assert [o["id"] for o in response.json()["data"]] == [order.id]
