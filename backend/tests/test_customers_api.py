"""
Tests for customer profile and saved address endpoints.
"""

from shared.config.constants import Role
from tests.conftest import auth_header, make_customer, make_order


class TestCustomerProfile:

    def test_profile_counts_orders(self, client, db_session, restaurant, customer, customer_headers):
        make_order(db_session, restaurant, customer=customer)
        # Guest order placed with the same email before registering
        make_order(db_session, restaurant, customer_email=customer.email)

        response = client.get(f"/api/customers/{customer.id}/profile", headers=customer_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["total_orders"] == 2
        assert data["addresses"] == []

    def test_other_customer_is_forbidden(self, client, db_session, customer):
        other = make_customer(db_session, email="other@test.com", phone="9200000002")
        response = client.get(f"/api/customers/{customer.id}/profile", headers=auth_header(other.id, Role.CUSTOMER))
        assert response.status_code == 403


class TestAddresses:

    def _add(self, client, customer, headers, **fields):
        body = {"label": "Home", "address": "1 Lake Road"}
        body.update(fields)
        return client.post(f"/api/customers/{customer.id}/addresses", json=body, headers=headers)

    def test_first_address_becomes_default(self, client, customer, customer_headers):
        response = self._add(client, customer, customer_headers)

        assert response.status_code == 201
        assert response.json()["data"]["is_default"] is True

    def test_new_default_demotes_previous(self, client, customer, customer_headers):
        self._add(client, customer, customer_headers)
        self._add(client, customer, customer_headers, label="Work", address="9 Tech Park", is_default=True)

        addresses = client.get(f"/api/customers/{customer.id}/addresses", headers=customer_headers).json()["data"]

        assert [(a["label"], a["is_default"]) for a in addresses] == [("Home", False), ("Work", True)]

    def test_deleting_default_promotes_next(self, client, customer, customer_headers):
        home = self._add(client, customer, customer_headers).json()["data"]
        self._add(client, customer, customer_headers, label="Work", address="9 Tech Park")

        response = client.delete(f"/api/customers/{customer.id}/addresses/{home['id']}", headers=customer_headers)

        assert response.status_code == 200
        addresses = client.get(f"/api/customers/{customer.id}/addresses", headers=customer_headers).json()["data"]
        assert [(a["label"], a["is_default"]) for a in addresses] == [("Work", True)]

    def test_delete_unknown_address(self, client, customer, customer_headers):
        response = client.delete(f"/api/customers/{customer.id}/addresses/999", headers=customer_headers)
        assert response.status_code == 404
