"""Authentication service."""

import logging
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from cms_api.config import get_settings
from cms_api.exceptions import UnauthenticatedError, UserNotFoundError
from cms_api.models.dto.auth import RegisterRequest, TokenResponse, UserInfo
from cms_api.models.dto.rbac import UserCreateRequest
from cms_api.repositories.user_repository import UserRepository
from cms_api.security.auth import create_access_token
from cms_api.security.password import get_password_service
from cms_api.services.permission_resolver import PermissionResolver
from cms_api.services.rbac_service import RbacService

logger = logging.getLogger(__name__)


class AuthService:
    """Service for authentication operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize service with database session."""
        self.session = session
        self.user_repo = UserRepository(session)
        self.resolver = PermissionResolver(session)
        self.password_service = get_password_service()

    async def authenticate_local(self, email: str, password: str) -> TokenResponse:
        """Authenticate with email and password.

        Args:
            email: User email
            password: User password

        Returns:
            TokenResponse with a signed access token

        Raises:
            UnauthenticatedError: If credentials are invalid or the account is disabled
        """
        user = await self.user_repo.get_by_email(email.lower())

        # Unknown accounts still cost one bcrypt check
        password_hash = user.password_hash if user is not None else self.password_service.dummy_hash
        password_ok = self.password_service.verify_password(password, password_hash)

        if user is None or not password_ok:
            logger.warning(f"Failed login attempt for {email}")
            raise UnauthenticatedError("Invalid credentials")

        if not user.is_active:
            logger.warning(f"Login attempt for deactivated account {email}")
            raise UnauthenticatedError("Your account has been deactivated")

        user.last_login_at = datetime.now(timezone.utc)
        await self.session.commit()

        return self._issue_token(user.id, user.email)

    async def register(self, request: RegisterRequest) -> TokenResponse:
        """Create an account for a new user and log them in.

        The account goes through the regular user creation, so it receives
        the default role.

        Raises:
            UserAlreadyExistsError: If email exists
        """
        user = await RbacService(self.session).create_user(
            UserCreateRequest(email=request.email, name=request.name, password=request.password)
        )
        logger.info(f"User registered: {user.email}")
        return self._issue_token(user.id, user.email)

    def _issue_token(self, user_id: UUID, email: str) -> TokenResponse:
        settings = get_settings()
        return TokenResponse(
            access_token=create_access_token(user_id=user_id, email=email),
            expires_in=settings.jwt_expiration_hours * 3600,
        )

    async def get_user_info(self, user_id: UUID) -> UserInfo:
        """Get a user with resolved role and permissions.

        Raises:
            UserNotFoundError: If user not found
        """
        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise UserNotFoundError(user_id)

        principal = await self.resolver.resolve_principal(user)
        return UserInfo(
            id=principal.id,
            email=principal.email,
            name=principal.name,
            is_active=principal.is_active,
            role_id=principal.role_id,
            role_name=principal.role_name,
            is_super_admin=principal.is_super_admin,
            permissions=sorted(principal.permissions),
        )
