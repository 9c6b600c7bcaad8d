"""
Delivery partner routers - /api/delivery/*
"""

from .routes import router

__all__ = ["router"]
