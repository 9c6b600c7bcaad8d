"""
Restaurant routers - /api/restaurants/*
Public browsing: listing, search, menus and stats.
"""

from .routes import router

__all__ = ["router"]
