"""API routers package."""

from cms_api.routers import auth, permissions, roles, users

__all__ = [
    "auth",
    "permissions",
    "roles",
    "users",
]
