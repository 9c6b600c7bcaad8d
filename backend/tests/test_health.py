"""
Tests for the health endpoints.
"""

from shared.utils.health import HealthCheckResult, HealthStatus, aggregate_health_checks


class TestHealthEndpoints:

    def test_basic_health(self, client):
        response = client.get("/api/health")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["status"] == "healthy"
        assert data["environment"] == "test"

    def test_detailed_health(self, client):
        response = client.get("/api/health/detailed")

        assert response.status_code == 200
        components = response.json()["data"]["components"]
        assert components["database"]["status"] == "healthy"
        assert components["assignment_sweeper"]["details"] == {"enabled": False, "running": False}


class TestAggregate:

    def test_any_unhealthy_component_degrades(self):
        result = aggregate_health_checks([
            HealthCheckResult(status=HealthStatus.HEALTHY, component="database"),
            HealthCheckResult(status=HealthStatus.UNHEALTHY, component="assignment_sweeper", error="stopped"),
        ])

        assert result["status"] == "degraded"
        assert result["components"]["assignment_sweeper"]["error"] == "stopped"
