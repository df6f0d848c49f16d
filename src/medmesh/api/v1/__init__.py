"""Version 1 API endpoints."""

from .endpoints import admin_router, models_router, users_router

__all__ = [
    "admin_router",
    "models_router",
    "users_router",
]
