"""
Order routers - /api/orders/*
Placement, role-scoped listing and lifecycle transitions.
"""

from .routes import router

__all__ = ["router"]
