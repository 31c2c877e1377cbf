"""Authentication and authorization dependencies.

Authentication (``get_current_user``) turns a bearer token into an
:class:`AuthenticatedUser` whose role and permissions are already resolved.
The authorization dependencies built on top of it are pure predicates over
that object: they never touch the database, and the first one that fails
ends the request before the route handler runs.

Usage::

    @router.delete(
        "/{role_id}",
        dependencies=[Depends(require_permission(Permissions.ROLES_DELETE))],
    )
"""

from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta, timezone
from typing import Annotated
from uuid import UUID

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession

from cms_api.config import get_settings
from cms_api.database import get_db
from cms_api.exceptions import ForbiddenError, UnauthenticatedError
from cms_api.models.domain.user import AuthenticatedUser
from cms_api.repositories.user_repository import UserRepository
from cms_api.services.permission_resolver import PermissionResolver

bearer_scheme = HTTPBearer(auto_error=False)

AccessCheck = Callable[[AuthenticatedUser], Awaitable[AuthenticatedUser]]


def create_access_token(user_id: UUID, email: str) -> str:
    """Create a JWT access token.

    Args:
        user_id: User UUID
        email: User email

    Returns:
        JWT token string
    """
    settings = get_settings()
    now = datetime.now(timezone.utc)

    payload = {
        "sub": str(user_id),
        "email": email,
        "exp": now + timedelta(hours=settings.jwt_expiration_hours),
        "iat": now,
    }

    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict:
    """Decode and verify a JWT token.

    Args:
        token: JWT token string

    Returns:
        Token payload

    Raises:
        UnauthenticatedError: If token is invalid or expired
    """
    settings = get_settings()

    try:
        return jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError as e:
        raise UnauthenticatedError("Invalid or expired token") from e


async def get_current_user(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AuthenticatedUser:
    """Get the current authenticated user.

    The token is read from the ``Authorization: Bearer`` header, falling
    back to the session cookie.

    Returns:
        AuthenticatedUser with role and permissions resolved

    Raises:
        UnauthenticatedError: If no valid credential is present, the user no
            longer exists, or the account is deactivated
    """
    token = credentials.credentials if credentials is not None else None
    if not token:
        token = request.cookies.get(get_settings().jwt_cookie_name)
    if not token:
        raise UnauthenticatedError()

    payload = decode_token(token)
    try:
        user_id = UUID(payload["sub"])
    except (KeyError, TypeError, ValueError) as e:
        raise UnauthenticatedError("Invalid or expired token") from e

    user = await UserRepository(db).get_by_id(user_id)
    if user is None:
        raise UnauthenticatedError()
    if not user.is_active:
        raise UnauthenticatedError("Your account has been deactivated")

    current_user = await PermissionResolver(db).resolve_principal(user)
    request.state.user = current_user
    return current_user


CurrentUser = Annotated[AuthenticatedUser, Depends(get_current_user)]


def require_role(*role_names: str) -> AccessCheck:
    """Allow only users whose role name is one of ``role_names``.

    Args:
        role_names: Accepted role names

    Returns:
        Dependency returning the current user

    Raises:
        ForbiddenError: If the user has no role or a role not in the list
    """

    async def check_role(current_user: CurrentUser) -> AuthenticatedUser:
        if current_user.role_name is None:
            raise ForbiddenError("Not authorized to access this route")
        if not current_user.has_role(*role_names):
            raise ForbiddenError(
                f"User role {current_user.role_name} is not authorized to access this route",
                {"role": current_user.role_name},
            )
        return current_user

    return check_role


def require_permission(permission_code: str) -> AccessCheck:
    """Allow only users holding ``permission_code`` (super admins always pass).

    Raises:
        ForbiddenError: If the permission is missing
    """

    async def check_permission(current_user: CurrentUser) -> AuthenticatedUser:
        if not current_user.has_permission(permission_code):
            raise ForbiddenError(
                "You do not have permission to perform this action",
                {"required": [permission_code]},
            )
        return current_user

    return check_permission


def require_any_permission(*permission_codes: str) -> AccessCheck:
    """Allow users holding at least one of ``permission_codes``.

    Raises:
        ForbiddenError: If none of the permissions is held
    """

    async def check_any_permission(current_user: CurrentUser) -> AuthenticatedUser:
        if not current_user.has_any_permission(*permission_codes):
            raise ForbiddenError(
                "You do not have permission to perform this action",
                {"required_any": list(permission_codes)},
            )
        return current_user

    return check_any_permission


def require_all(*checks: AccessCheck) -> AccessCheck:
    """Compose checks; they run in order and the first failure wins.

    Args:
        checks: Dependencies created by the ``require_*`` factories

    Returns:
        Dependency returning the current user once every check passed
    """

    async def check_all(current_user: CurrentUser) -> AuthenticatedUser:
        for check in checks:
            await check(current_user)
        return current_user

    return check_all
