"""
Tests for registration, login and account challenge endpoints.
"""

from datetime import timedelta

from rest_api.models import Customer, Restaurant, Vendor
from rest_api.services.auth import PendingRegistration
from shared.config.constants import ErrorMessages, Role
from shared.security import password as password_module
from shared.security.password import hash_password
from shared.utils.otp import utcnow
from tests.conftest import TEST_PASSWORD, auth_header


def _registration(role="customer", email="new@test.com", phone="9300000001", **extra):
    body = {
        "role": role,
        "name": "New User",
        "email": email,
        "phone": phone,
        "password": "secret123",
    }
    body.update(extra)
    return body


class TestRegistration:

    def test_customer_registration_flow(self, client, sender, db_session):
        response = client.post("/api/auth/send-registration-otp", json=_registration())
        assert response.status_code == 200
        assert response.json()["message"] == "OTP sent to your email"

        code = sender.last_code("new@test.com", "registration")
        assert code is not None and len(code) == 6

        response = client.post("/api/auth/verify-registration-otp", json={"email": "new@test.com", "otp": code})
        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["data"]["token"]
        assert body["data"]["user"]["role"] == "customer"

        customer = db_session.query(Customer).filter_by(email="new@test.com").one()
        assert customer.email_verified is True

    def test_vendor_registration_creates_restaurant(self, client, sender, db_session):
        body = _registration(
            role="vendor", email="chef@test.com",
            restaurant_name="Chef's Corner", cuisine="Bengali",
            street="1 Park St", city="Kolkata", state="WB", pincode="700016",
        )
        client.post("/api/auth/send-registration-otp", json=body)
        code = sender.last_code("chef@test.com")

        response = client.post("/api/auth/verify-registration-otp", json={"email": "chef@test.com", "otp": code})

        assert response.status_code == 201
        vendor = db_session.query(Vendor).filter_by(email="chef@test.com").one()
        restaurant = db_session.query(Restaurant).filter_by(vendor_id=vendor.id).one()
        assert restaurant.name == "Chef's Corner"
        assert restaurant.full_address == "1 Park St, Kolkata, WB - 700016"
        assert response.json()["data"]["user"]["restaurant_id"] == restaurant.id

    def test_vendor_requires_restaurant_name(self, client):
        response = client.post("/api/auth/send-registration-otp", json=_registration(role="vendor"))
        assert response.status_code == 400
        assert "restaurant_name" in response.json()["message"]

    def test_delivery_requires_vehicle_number(self, client):
        response = client.post("/api/auth/send-registration-otp", json=_registration(role="delivery"))
        assert response.status_code == 400
        assert "vehicle_number" in response.json()["message"]

    def test_admin_cannot_self_register(self, client):
        response = client.post("/api/auth/send-registration-otp", json=_registration(role="admin"))
        assert response.status_code == 400

    def test_existing_account_is_rejected(self, client, customer):
        response = client.post(
            "/api/auth/send-registration-otp",
            json=_registration(email=customer.email, phone="9399999999"),
        )
        assert response.status_code == 400
        assert response.json()["message"] == ErrorMessages.ACCOUNT_EXISTS

    def test_latest_registration_wins(self, client, sender, pending_store):
        client.post("/api/auth/send-registration-otp", json=_registration(phone="9300000001"))
        first_code = sender.last_code("new@test.com")
        client.post("/api/auth/send-registration-otp", json=_registration(phone="9300000002"))
        second_code = sender.last_code("new@test.com")

        assert len(pending_store) == 1
        assert pending_store.peek("new@test.com").phone == "9300000002"
        if first_code != second_code:
            response = client.post(
                "/api/auth/verify-registration-otp", json={"email": "new@test.com", "otp": first_code}
            )
            assert response.status_code == 400

        response = client.post(
            "/api/auth/verify-registration-otp", json={"email": "new@test.com", "otp": second_code}
        )
        assert response.status_code == 201
        assert response.json()["data"]["user"]["phone"] == "9300000002"

    def test_wrong_code_keeps_pending_registration(self, client, sender, pending_store):
        client.post("/api/auth/send-registration-otp", json=_registration())
        code = sender.last_code("new@test.com")
        wrong = "000000" if code != "000000" else "111111"

        response = client.post("/api/auth/verify-registration-otp", json={"email": "new@test.com", "otp": wrong})

        assert response.status_code == 400
        assert response.json()["message"] == ErrorMessages.INVALID_OTP
        assert pending_store.peek("new@test.com") is not None

    def test_expired_code_discards_pending_registration(self, client, db_session, pending_store):
        pending_store.put(PendingRegistration(
            role=Role.CUSTOMER,
            name="Late User",
            email="late@test.com",
            phone="9300000009",
            password_hash=hash_password("secret123"),
            code="123456",
            expires_at=utcnow() - timedelta(minutes=1),
        ))

        response = client.post("/api/auth/verify-registration-otp", json={"email": "late@test.com", "otp": "123456"})

        assert response.status_code == 400
        assert response.json()["message"] == ErrorMessages.OTP_EXPIRED
        assert pending_store.peek("late@test.com") is None
        assert db_session.query(Customer).filter_by(email="late@test.com").first() is None

    def test_verify_without_pending_registration(self, client):
        response = client.post("/api/auth/verify-registration-otp", json={"email": "ghost@test.com", "otp": "123456"})
        assert response.status_code == 400
        assert response.json()["message"] == ErrorMessages.NO_PENDING_REGISTRATION

    def test_email_failure_discards_pending_registration(self, client, sender, pending_store):
        sender.fail = True
        response = client.post("/api/auth/send-registration-otp", json=_registration())
        assert response.status_code == 500
        assert len(pending_store) == 0

    def test_invalid_phone_is_a_validation_error(self, client):
        response = client.post("/api/auth/send-registration-otp", json=_registration(phone="12ab"))
        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["message"] == "Validation failed"
        assert any(e["field"] == "phone" for e in body["errors"])


class TestLogin:

    def test_customer_login(self, client, customer):
        response = client.post(
            "/api/auth/login-customer",
            json={"email": customer.email.upper(), "password": TEST_PASSWORD},
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["token_type"] == "Bearer"
        assert data["user"]["id"] == customer.id
        assert data["expires_in"] == 7 * 24 * 60 * 60

    def test_unknown_email_still_runs_a_password_check(self, client, monkeypatch):
        checked = []
        real_checkpw = password_module.bcrypt.checkpw

        def recording_checkpw(password, hashed):
            checked.append(password)
            return real_checkpw(password, hashed)

        monkeypatch.setattr(password_module.bcrypt, "checkpw", recording_checkpw)

        response = client.post("/api/auth/login-customer", json={"email": "ghost@test.com", "password": "guess123"})

        assert response.status_code == 401
        assert response.json()["message"] == ErrorMessages.INVALID_CREDENTIALS
        assert checked == [b"guess123"]

    def test_wrong_password(self, client, customer):
        response = client.post("/api/auth/login-customer", json={"email": customer.email, "password": "nope"})
        assert response.status_code == 401
        assert response.json()["message"] == ErrorMessages.INVALID_CREDENTIALS

    def test_login_is_per_role(self, client, customer):
        response = client.post("/api/auth/login-vendor", json={"email": customer.email, "password": TEST_PASSWORD})
        assert response.status_code == 401

    def test_vendor_login_returns_restaurant(self, client, vendor):
        response = client.post("/api/auth/login-vendor", json={"email": vendor.email, "password": TEST_PASSWORD})
        assert response.status_code == 200
        assert response.json()["data"]["user"]["restaurant_id"] == vendor.restaurant.id

    def test_deactivated_account_cannot_login(self, client, db_session, courier):
        courier.is_active = False
        db_session.commit()
        response = client.post("/api/auth/login-delivery", json={"email": courier.email, "password": TEST_PASSWORD})
        assert response.status_code == 401

    def test_admin_login_updates_last_login(self, client, db_session, admin):
        response = client.post("/api/auth/login-admin", json={"email": admin.email, "password": TEST_PASSWORD})
        assert response.status_code == 200
        assert response.json()["data"]["user"]["permissions"] == ["read", "write"]
        db_session.refresh(admin)
        assert admin.last_login is not None


class TestPinLogin:

    def test_vendor_pin(self, client, vendor):
        response = client.post("/api/auth/login-pin", json={"role": "vendor", "pin": "1234", "email": vendor.email})
        assert response.status_code == 200
        assert response.json()["data"]["user"]["id"] == vendor.id

    def test_wrong_vendor_pin(self, client, vendor):
        response = client.post("/api/auth/login-pin", json={"role": "vendor", "pin": "0000"})
        assert response.status_code == 401

    def test_admin_pin(self, client, admin):
        response = client.post("/api/auth/login-pin", json={"role": "admin", "pin": "9999"})
        assert response.status_code == 200
        assert response.json()["data"]["user"]["role"] == "admin"

    def test_delivery_pin_is_not_supported(self, client, courier):
        response = client.post("/api/auth/login-pin", json={"role": "delivery", "pin": "5678"})
        assert response.status_code == 400


class TestMe:

    def test_me_returns_account(self, client, customer, customer_headers):
        response = client.get("/api/auth/me", headers=customer_headers)
        assert response.status_code == 200
        assert response.json()["data"]["email"] == customer.email

    def test_me_requires_token(self, client):
        response = client.get("/api/auth/me")
        assert response.status_code == 401
        assert response.json()["success"] is False

    def test_me_rejects_garbage_token(self, client):
        response = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401

    def test_me_for_deleted_account(self, client):
        response = client.get("/api/auth/me", headers=auth_header(4242, Role.CUSTOMER))
        assert response.status_code == 404


class TestPasswordReset:

    def test_unknown_email_gets_the_same_reply(self, client, customer):
        known = client.post("/api/auth/forgot-password", json={"email": customer.email})
        unknown = client.post("/api/auth/forgot-password", json={"email": "ghost@test.com"})

        assert known.status_code == unknown.status_code == 200
        assert known.json()["message"] == unknown.json()["message"] == ErrorMessages.PASSWORD_RESET_SENT

    def test_reset_then_login_with_new_password(self, client, sender, customer):
        client.post("/api/auth/forgot-password", json={"email": customer.email})
        code = sender.last_code(customer.email, "password_reset")

        response = client.post(
            "/api/auth/reset-password",
            json={"email": customer.email, "otp": code, "new_password": "brandnew1"},
        )
        assert response.status_code == 200

        login = client.post("/api/auth/login-customer", json={"email": customer.email, "password": "brandnew1"})
        assert login.status_code == 200

    def test_reset_code_is_single_use(self, client, sender, customer):
        client.post("/api/auth/forgot-password", json={"email": customer.email})
        code = sender.last_code(customer.email, "password_reset")
        body = {"email": customer.email, "otp": code, "new_password": "brandnew1"}

        assert client.post("/api/auth/reset-password", json=body).status_code == 200
        assert client.post("/api/auth/reset-password", json=body).status_code == 400

    def test_reset_with_wrong_code(self, client, customer):
        response = client.post(
            "/api/auth/reset-password",
            json={"email": customer.email, "otp": "000000", "new_password": "brandnew1"},
        )
        assert response.status_code == 400
        assert response.json()["message"] == ErrorMessages.INVALID_OR_EXPIRED_OTP


class TestEmailVerification:

    def test_verify_email(self, client, sender, db_session, customer):
        response = client.post("/api/auth/send-verification-otp", json={"email": customer.email})
        assert response.json()["message"] == ErrorMessages.VERIFICATION_SENT
        code = sender.last_code(customer.email, "email_verification")

        response = client.post("/api/auth/verify-email-otp", json={"email": customer.email, "otp": code})

        assert response.status_code == 200
        db_session.refresh(customer)
        assert customer.email_verified is True

    def test_unknown_email_gets_the_same_reply(self, client, sender):
        response = client.post("/api/auth/send-verification-otp", json={"email": "ghost@test.com"})
        assert response.status_code == 200
        assert response.json()["message"] == ErrorMessages.VERIFICATION_SENT
        assert sender.sent == []
