"""
Customer routers - /api/customers/*
"""

from .routes import router

__all__ = ["router"]
