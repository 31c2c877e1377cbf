"""User repository."""

from uuid import UUID

from cms_api.models.orm.user import UserORM
from cms_api.repositories.base import BaseRepository


class UserRepository(BaseRepository[UserORM]):
    """Repository for user operations."""

    model = UserORM

    async def get_by_email(self, email: str) -> UserORM | None:
        """Get user by email.

        Args:
            email: User email address

        Returns:
            UserORM or None if not found
        """
        return await self.find_one(email=email)

    async def get_by_role(self, role_id: UUID) -> list[UserORM]:
        """Get all users assigned to a role, ordered by name.

        Args:
            role_id: Role UUID

        Returns:
            List of UserORM
        """
        return await self.find(UserORM.name, role_id=role_id)

    async def count_by_role(self, role_id: UUID) -> int:
        """Count users assigned to a role."""
        return await self.count(role_id=role_id)

    async def get_all(self) -> list[UserORM]:
        """Get all users ordered by name."""
        return await self.find(UserORM.name)
