"""
Tests for middlewares and error rendering.
"""


class TestSecurityMiddlewares:

    def test_security_headers(self, client):
        response = client.get("/api/health")

        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"
        assert "Content-Security-Policy" in response.headers

    def test_api_route_gets_security_headers(self, client, restaurant):
        response = client.get("/api/restaurants")

        assert response.status_code == 200
        assert response.json()["success"] is True
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["Referrer-Policy"] == "strict-origin-when-cross-origin"
        assert "server" not in response.headers

    def test_error_response_gets_security_headers(self, client):
        response = client.get("/api/orders")

        assert response.status_code == 401
        assert response.headers["X-Frame-Options"] == "DENY"

    def test_request_id_is_generated(self, client):
        response = client.get("/api/health")
        assert response.headers["X-Request-ID"]

    def test_request_id_is_echoed(self, client):
        response = client.get("/api/health", headers={"X-Request-ID": "trace-123"})
        assert response.headers["X-Request-ID"] == "trace-123"

    def test_non_json_body_is_rejected(self, client):
        response = client.post(
            "/api/auth/login-customer",
            content="email=a@b.com",
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )

        assert response.status_code == 415
        assert response.json()["success"] is False


class TestErrorEnvelope:

    def test_unknown_route(self, client):
        response = client.get("/api/nowhere")

        assert response.status_code == 404
        assert response.json()["success"] is False

    def test_validation_errors_list_fields(self, client):
        response = client.post("/api/auth/login-customer", json={"email": "not-an-email"})

        assert response.status_code == 400
        body = response.json()
        assert body["message"] == "Validation failed"
        fields = {e["field"] for e in body["errors"]}
        assert {"email", "password"} <= fields
