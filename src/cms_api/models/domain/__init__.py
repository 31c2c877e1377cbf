"""Domain models package."""

from cms_api.models.domain.user import AuthenticatedUser

__all__ = [
    "AuthenticatedUser",
]
