"""
Authentication routers - /api/auth/*
Handles OTP registration, per-role login and account challenges.
"""

from .routes import router

__all__ = ["router"]
