"""SQLAlchemy ORM models package."""

from cms_api.models.orm.base import Base
from cms_api.models.orm.permission import PermissionORM
from cms_api.models.orm.role import RoleORM
from cms_api.models.orm.role_permission import RolePermissionORM
from cms_api.models.orm.user import UserORM

__all__ = [
    "Base",
    "PermissionORM",
    "RoleORM",
    "RolePermissionORM",
    "UserORM",
]
