"""Authentication DTOs."""

from uuid import UUID

from pydantic import BaseModel, EmailStr, Field


class LoginRequest(BaseModel):
    """Local login request."""

    email: EmailStr
    password: str = Field(min_length=1, max_length=128)


class TokenResponse(BaseModel):
    """Token response DTO."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int


class UserInfo(BaseModel):
    """Current user with resolved role and permissions."""

    id: UUID
    email: EmailStr
    name: str
    is_active: bool
    role_id: UUID | None = None
    role_name: str | None = None
    is_super_admin: bool = False
    permissions: list[str]


class RegisterRequest(BaseModel):
    """Self-signup request. The new user always receives the default role."""

    email: EmailStr
    name: str = Field(min_length=1, max_length=50)
    password: str = Field(min_length=6, max_length=128)
