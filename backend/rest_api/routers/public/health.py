"""
Health check endpoints for the REST API.
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text

from rest_api.routers._common import ok
from rest_api.services.assignment_sweeper import get_assignment_sweeper
from shared.config.settings import settings
from shared.infrastructure.db import SessionLocal
from shared.utils.health import (
    HealthCheckResult,
    HealthStatus,
    aggregate_health_checks,
    sync_health_check_with_timeout,
)


router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health")
def health_check():
    """
    Basic health check endpoint.
    Returns service status without checking dependencies.
    """
    return ok(
        {
            "status": HealthStatus.HEALTHY.value,
            "service": "rest-api",
            "environment": settings.environment,
        },
        message="Gaon Zaika API is running",
    )


@sync_health_check_with_timeout(timeout=3.0, component="database")
def check_database_health() -> dict:
    """Check database connectivity."""
    with SessionLocal() as db:
        db.execute(text("SELECT 1"))
        dialect = db.get_bind().dialect.name
    return {"dialect": dialect}


def check_sweeper_health() -> HealthCheckResult:
    sweeper = get_assignment_sweeper()
    enabled = settings.assignment_sweep_interval_seconds > 0
    return HealthCheckResult(
        status=HealthStatus.HEALTHY if sweeper.running or not enabled else HealthStatus.UNHEALTHY,
        component="assignment_sweeper",
        details={"enabled": enabled, "running": sweeper.running},
    )


@router.get("/health/detailed")
def detailed_health_check():
    """
    Health of the database and the assignment sweeper.

    Returns 503 Service Unavailable if any component is down.
    """
    result = aggregate_health_checks([check_database_health(), check_sweeper_health()])
    body = {
        "success": result["status"] == HealthStatus.HEALTHY.value,
        "message": f"Service {result['status']}",
        "data": {
            "service": "rest-api",
            "environment": settings.environment,
            **result,
        },
    }
    status_code = 200 if body["success"] else 503
    return JSONResponse(content=body, status_code=status_code)
