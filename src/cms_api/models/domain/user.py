"""Authenticated user domain model."""

from uuid import UUID

from pydantic import BaseModel, EmailStr


class AuthenticatedUser(BaseModel):
    """Request-scoped identity with its role and permissions already resolved.

    Every check on this model is a pure predicate: nothing here talks to the
    database, so authorization can run before the route handler without side
    effects.
    """

    id: UUID
    email: EmailStr
    name: str
    is_active: bool = True
    role_id: UUID | None = None
    role_name: str | None = None
    is_super_admin: bool = False
    permissions: frozenset[str] = frozenset()

    def has_permission(self, permission_code: str) -> bool:
        """Check if user has a specific permission.

        Super admins automatically have all permissions.

        Args:
            permission_code: Permission code to check

        Returns:
            True if user has the permission
        """
        if self.is_super_admin:
            return True
        return permission_code in self.permissions

    def has_any_permission(self, *permission_codes: str) -> bool:
        """Check if user has any of the specified permissions.

        Super admins automatically have all permissions.

        Args:
            permission_codes: Permission codes to check

        Returns:
            True if user has any of the permissions
        """
        if self.is_super_admin:
            return True
        return not self.permissions.isdisjoint(permission_codes)

    def has_all_permissions(self, *permission_codes: str) -> bool:
        """Check if user has all specified permissions."""
        if self.is_super_admin:
            return True
        return self.permissions.issuperset(permission_codes)

    def has_role(self, *role_names: str) -> bool:
        """Check if the user's role is one of the given role names."""
        return self.role_name is not None and self.role_name in role_names
