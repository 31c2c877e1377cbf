"""Permission resolution for users.

A user holds at most one role; the effective permission set is the set of
codes of that role's permissions. Missing or dangling role references
resolve to an empty set rather than an error. Roles flagged ``grants_all``
and the configured super-admin role name bypass every permission check.
"""

import logging
from typing import Iterable, Protocol
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from cms_api.config import get_settings
from cms_api.models.domain.user import AuthenticatedUser
from cms_api.models.orm.role import RoleORM
from cms_api.repositories.role_repository import RoleRepository

logger = logging.getLogger(__name__)


class HasRoleReference(Protocol):
    """Anything carrying an optional role id (ORM user, domain user)."""

    role_id: UUID | None


class PermissionResolver:
    """Computes effective permissions for a user from the role store."""

    def __init__(self, session: AsyncSession, super_admin_role_name: str | None = None) -> None:
        """Initialize resolver with database session.

        Args:
            session: Database session
            super_admin_role_name: Role name granting every permission;
                defaults to the configured value
        """
        self.role_repo = RoleRepository(session)
        self.super_admin_role_name = (
            super_admin_role_name or get_settings().super_admin_role_name
        )

    async def _load_role(self, user: HasRoleReference) -> RoleORM | None:
        """Fetch the user's role with its permissions, or None if absent/dangling."""
        if user.role_id is None:
            return None
        role = await self.role_repo.get_with_permissions(user.role_id)
        if role is None:
            logger.warning(f"User references missing role {user.role_id}")
        return role

    def is_super_admin_role(self, role: RoleORM | None) -> bool:
        """Check whether a role bypasses permission checks."""
        if role is None:
            return False
        return role.grants_all or role.name == self.super_admin_role_name

    async def resolve_permissions(self, user: HasRoleReference) -> set[str]:
        """Get the effective permission codes of a user.

        Args:
            user: User with a (possibly null) role reference

        Returns:
            Set of permission codes; empty when the user has no valid role
        """
        role = await self._load_role(user)
        if role is None:
            return set()
        return {p.code for p in role.permissions}

    async def has_permission(self, user: HasRoleReference, code: str) -> bool:
        """Check if a user holds a permission code.

        Args:
            user: User to check
            code: Permission code

        Returns:
            True if the role bypasses checks or grants ``code``
        """
        role = await self._load_role(user)
        if role is None:
            return False
        if self.is_super_admin_role(role):
            return True
        return any(p.code == code for p in role.permissions)

    async def has_any_permission(self, user: HasRoleReference, codes: Iterable[str]) -> bool:
        """Check if a user holds at least one of the permission codes.

        Args:
            user: User to check
            codes: Candidate permission codes

        Returns:
            True if the role bypasses checks or grants any of ``codes``
        """
        role = await self._load_role(user)
        if role is None:
            return False
        if self.is_super_admin_role(role):
            return True
        granted = {p.code for p in role.permissions}
        return not granted.isdisjoint(codes)

    async def resolve_principal(self, user) -> AuthenticatedUser:
        """Build the request-scoped identity for an authenticated user.

        Args:
            user: UserORM (or any object with the same attributes)

        Returns:
            AuthenticatedUser with role name and permissions resolved
        """
        role = await self._load_role(user)
        return AuthenticatedUser(
            id=user.id,
            email=user.email,
            name=user.name,
            is_active=user.is_active,
            role_id=role.id if role is not None else None,
            role_name=role.name if role is not None else None,
            is_super_admin=self.is_super_admin_role(role),
            permissions=frozenset(p.code for p in role.permissions) if role is not None else frozenset(),
        )
