"""
Auth API package.

Contains the registration, OTP verification and login routes.
"""

from src.api.auth.routes import router

__all__ = ["router"]
