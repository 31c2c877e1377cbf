"""Repositories package."""

from cms_api.repositories.base import BaseRepository
from cms_api.repositories.permission_repository import PermissionRepository
from cms_api.repositories.role_repository import RoleRepository
from cms_api.repositories.user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "PermissionRepository",
    "RoleRepository",
    "UserRepository",
]
