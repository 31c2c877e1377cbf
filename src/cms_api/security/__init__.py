"""Security package."""

from cms_api.security.auth import (
    CurrentUser,
    create_access_token,
    get_current_user,
    require_all,
    require_any_permission,
    require_permission,
    require_role,
)
from cms_api.security.password import PasswordService, get_password_service

__all__ = [
    "CurrentUser",
    "PasswordService",
    "create_access_token",
    "get_current_user",
    "get_password_service",
    "require_all",
    "require_any_permission",
    "require_permission",
    "require_role",
]
