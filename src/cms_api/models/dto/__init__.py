"""Data Transfer Objects package."""

from cms_api.models.dto.auth import LoginRequest, TokenResponse, UserInfo
from cms_api.models.dto.common import ApiResponse, ErrorResponse
from cms_api.models.dto.rbac import (
    BulkPermissionCreateRequest,
    BulkPermissionCreateResponse,
    PermissionCreateRequest,
    PermissionResponse,
    PermissionUpdateRequest,
    RoleCreateRequest,
    RolePermissionsUpdateRequest,
    RoleResponse,
    RoleUpdateRequest,
    UserCreateRequest,
    UserResponse,
    UserRoleUpdateRequest,
)

__all__ = [
    "ApiResponse",
    "ErrorResponse",
    "LoginRequest",
    "TokenResponse",
    "UserInfo",
    "PermissionResponse",
    "PermissionCreateRequest",
    "PermissionUpdateRequest",
    "BulkPermissionCreateRequest",
    "BulkPermissionCreateResponse",
    "RoleResponse",
    "RoleCreateRequest",
    "RoleUpdateRequest",
    "RolePermissionsUpdateRequest",
    "UserResponse",
    "UserCreateRequest",
    "UserRoleUpdateRequest",
]
