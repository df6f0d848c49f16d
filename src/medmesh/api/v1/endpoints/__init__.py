"""API endpoint modules for version 1."""

from .admin import router as admin_router
from .models import router as models_router
from .users import router as users_router

__all__ = [
    "admin_router",
    "models_router",
    "users_router",
]
