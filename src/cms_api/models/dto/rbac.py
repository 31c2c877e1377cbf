"""Role and permission administration DTOs."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

# <module>:<action>, e.g. users:list or role:manage-permissions
PERMISSION_CODE_PATTERN = r"^[a-z][a-z0-9_-]*:[a-z][a-z0-9_-]*$"


# =============================================================================
# Permissions
# =============================================================================


class PermissionResponse(BaseModel):
    """Permission response DTO."""

    id: UUID
    name: str
    description: str
    code: str
    module: str
    created_at: datetime
    updated_at: datetime

    class Config:
        """Pydantic config."""

        from_attributes = True


class PermissionCreateRequest(BaseModel):
    """Permission creation request."""

    name: str = Field(min_length=2, max_length=255)
    description: str = Field(min_length=1, max_length=1000)
    code: str = Field(min_length=3, max_length=100, pattern=PERMISSION_CODE_PATTERN)
    module: str = Field(min_length=1, max_length=50)


class PermissionUpdateRequest(BaseModel):
    """Permission update request."""

    name: str | None = Field(default=None, min_length=2, max_length=255)
    description: str | None = Field(default=None, max_length=1000)
    code: str | None = Field(
        default=None, min_length=3, max_length=100, pattern=PERMISSION_CODE_PATTERN
    )
    module: str | None = Field(default=None, min_length=1, max_length=50)


class BulkPermissionCreateRequest(BaseModel):
    """Bulk permission creation request."""

    permissions: list[PermissionCreateRequest] = Field(min_length=1, max_length=500)


class BulkPermissionCreateResponse(BaseModel):
    """Outcome of a bulk permission creation."""

    created: int
    duplicates_skipped: int
    items: list[PermissionResponse]


# =============================================================================
# Roles
# =============================================================================


class RoleResponse(BaseModel):
    """Role response DTO with populated permissions."""

    id: UUID
    name: str
    description: str | None = None
    is_active: bool
    is_default: bool
    grants_all: bool
    permissions: list[PermissionResponse]
    created_at: datetime
    updated_at: datetime

    class Config:
        """Pydantic config."""

        from_attributes = True


class RoleCreateRequest(BaseModel):
    """Role creation request."""

    name: str = Field(min_length=2, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    is_active: bool = True
    is_default: bool = False
    grants_all: bool = False
    permission_ids: list[UUID] = Field(default=[], max_length=500)


class RoleUpdateRequest(BaseModel):
    """Role update request."""

    name: str | None = Field(default=None, min_length=2, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    is_active: bool | None = None
    is_default: bool | None = None
    grants_all: bool | None = None


class RolePermissionsUpdateRequest(BaseModel):
    """Replaces the complete permission set of a role."""

    permission_ids: list[UUID] = Field(max_length=500)


# =============================================================================
# Users
# =============================================================================


class UserResponse(BaseModel):
    """User response DTO."""

    id: UUID
    email: EmailStr
    name: str
    is_active: bool
    role_id: UUID | None = None
    last_login_at: datetime | None = None
    created_at: datetime
    updated_at: datetime

    class Config:
        """Pydantic config."""

        from_attributes = True


class UserCreateRequest(BaseModel):
    """User creation request. Without ``role_id`` the default role is assigned."""

    email: EmailStr
    name: str = Field(min_length=1, max_length=50)
    password: str = Field(min_length=6, max_length=128)
    role_id: UUID | None = None
    is_active: bool = True


class UserRoleUpdateRequest(BaseModel):
    """Reassigns a user's role; ``None`` removes it."""

    role_id: UUID | None
