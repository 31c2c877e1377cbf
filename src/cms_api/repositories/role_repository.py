"""Role repository."""

from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.orm import selectinload

from cms_api.models.orm.permission import PermissionORM
from cms_api.models.orm.role import RoleORM
from cms_api.models.orm.role_permission import RolePermissionORM
from cms_api.repositories.base import BaseRepository


class RoleRepository(BaseRepository[RoleORM]):
    """Repository for role operations."""

    model = RoleORM

    async def get_by_name(self, name: str) -> RoleORM | None:
        """Get role by name.

        Args:
            name: Role name

        Returns:
            RoleORM or None if not found
        """
        return await self.find_one(name=name)

    async def get_with_permissions(self, role_id: UUID) -> RoleORM | None:
        """Get role with permissions loaded.

        Args:
            role_id: Role UUID

        Returns:
            RoleORM with permissions or None
        """
        result = await self.session.execute(
            select(RoleORM)
            .options(selectinload(RoleORM.permissions))
            .where(RoleORM.id == role_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_all_with_permissions(self) -> list[RoleORM]:
        """Get all roles with permissions, ordered by name.

        Returns:
            List of RoleORM with permissions
        """
        result = await self.session.execute(
            select(RoleORM)
            .options(selectinload(RoleORM.permissions))
            .order_by(RoleORM.name)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def get_default(self) -> RoleORM | None:
        """Get the role flagged as default, if any."""
        result = await self.session.execute(
            select(RoleORM)
            .where(RoleORM.is_default.is_(True))
            .order_by(RoleORM.created_at)
            .limit(1)
        )
        return result.scalars().first()

    async def get_defaults(self) -> list[RoleORM]:
        """Get every role flagged as default, oldest first."""
        result = await self.session.execute(
            select(RoleORM)
            .where(RoleORM.is_default.is_(True))
            .order_by(RoleORM.created_at, RoleORM.name)
        )
        return list(result.scalars().all())

    async def clear_default(self, exclude_id: UUID | None = None) -> int:
        """Unset ``is_default`` on every default role, optionally sparing one.

        Args:
            exclude_id: Role that keeps its flag

        Returns:
            Number of roles changed
        """
        criteria = [RoleORM.is_default.is_(True)]
        if exclude_id is not None:
            criteria.append(RoleORM.id != exclude_id)
        return await self.update_where({"is_default": False}, *criteria)

    async def set_permissions(
        self,
        role: RoleORM,
        permissions: list[PermissionORM],
    ) -> None:
        """Set permissions for a role (replaces existing).

        Args:
            role: Role loaded with its permissions
            permissions: The complete new permission set
        """
        role.permissions = list(permissions)
        await self.session.flush()

    async def delete_role(self, role_id: UUID) -> bool:
        """Delete a role together with its permission links.

        Args:
            role_id: Role UUID

        Returns:
            True if deleted
        """
        await self.session.execute(
            delete(RolePermissionORM).where(RolePermissionORM.role_id == role_id)
        )
        return await self.delete(role_id)
