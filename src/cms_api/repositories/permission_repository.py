"""Permission repository."""

from uuid import UUID

from sqlalchemy import delete, func, select

from cms_api.models.orm.permission import PermissionORM
from cms_api.models.orm.role_permission import RolePermissionORM
from cms_api.repositories.base import BaseRepository


class PermissionRepository(BaseRepository[PermissionORM]):
    """Repository for permission operations."""

    model = PermissionORM

    async def get_by_code(self, code: str) -> PermissionORM | None:
        """Get permission by code.

        Args:
            code: Permission code

        Returns:
            PermissionORM or None if not found
        """
        return await self.find_one(code=code)

    async def get_by_name(self, name: str) -> PermissionORM | None:
        """Get permission by display name."""
        return await self.find_one(name=name)

    async def get_existing_codes(self, codes: list[str]) -> set[str]:
        """Return the subset of ``codes`` already stored.

        Args:
            codes: Candidate permission codes

        Returns:
            Set of codes that already exist
        """
        if not codes:
            return set()
        result = await self.session.execute(
            select(PermissionORM.code).where(PermissionORM.code.in_(codes))
        )
        return set(result.scalars().all())

    async def get_existing_names(self, names: list[str]) -> set[str]:
        """Return the subset of ``names`` already stored."""
        if not names:
            return set()
        result = await self.session.execute(
            select(PermissionORM.name).where(PermissionORM.name.in_(names))
        )
        return set(result.scalars().all())

    async def get_all(self, module: str | None = None) -> list[PermissionORM]:
        """Get all permissions, sorted by module then name.

        Args:
            module: Optional module to filter on

        Returns:
            List of PermissionORM
        """
        query = select(PermissionORM).order_by(PermissionORM.module, PermissionORM.name)
        if module is not None:
            query = query.where(PermissionORM.module == module)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def create_many(self, items: list[dict]) -> list[PermissionORM]:
        """Insert several permissions at once.

        Args:
            items: Field dicts for the new permissions

        Returns:
            Created PermissionORM records, in input order
        """
        instances = [PermissionORM(**item) for item in items]
        self.session.add_all(instances)
        await self.session.flush()
        return instances

    async def count_role_assignments(self, permission_id: UUID) -> int:
        """Count roles that currently hold this permission."""
        result = await self.session.execute(
            select(func.count())
            .select_from(RolePermissionORM)
            .where(RolePermissionORM.permission_id == permission_id)
        )
        return result.scalar_one()

    async def delete_permission(self, permission_id: UUID) -> bool:
        """Delete a permission and drop it from every role holding it.

        Args:
            permission_id: Permission UUID

        Returns:
            True if deleted
        """
        await self.session.execute(
            delete(RolePermissionORM).where(RolePermissionORM.permission_id == permission_id)
        )
        return await self.delete(permission_id)
