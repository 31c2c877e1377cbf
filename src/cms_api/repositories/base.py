"""Base repository with common database operations."""

from typing import Any, Generic, TypeVar
from uuid import UUID

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from cms_api.models.orm.base import Base

T = TypeVar("T", bound=Base)


class BaseRepository(Generic[T]):
    """Base repository with common CRUD operations.

    Filters are equality matches on column names, e.g.
    ``await repo.find_one(code="users:list")``.
    """

    model: type[T]

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session."""
        self.session = session

    async def get(self, id: UUID) -> T | None:
        """Get a record by ID.

        Args:
            id: Record UUID

        Returns:
            Record or None if not found
        """
        result = await self.session.execute(
            select(self.model).where(self.model.id == id)
        )
        return result.scalar_one_or_none()

    async def get_by_id(self, id: UUID) -> T | None:
        """Get a record by ID (alias for get)."""
        return await self.get(id)

    async def find(self, *order_by: Any, **filters: Any) -> list[T]:
        """Get all records matching the given column values.

        Args:
            *order_by: Optional ordering clauses
            **filters: Column name to value equality filters

        Returns:
            List of matching records
        """
        query = select(self.model).filter_by(**filters)
        if order_by:
            query = query.order_by(*order_by)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def find_one(self, **filters: Any) -> T | None:
        """Get the first record matching the given column values.

        Args:
            **filters: Column name to value equality filters

        Returns:
            Record or None if nothing matches
        """
        result = await self.session.execute(
            select(self.model).filter_by(**filters).limit(1)
        )
        return result.scalars().first()

    async def get_many(self, ids: list[UUID]) -> list[T]:
        """Get every record whose ID is in ``ids``.

        Unknown IDs are silently absent from the result.
        """
        if not ids:
            return []
        result = await self.session.execute(
            select(self.model).where(self.model.id.in_(ids))
        )
        return list(result.scalars().all())

    async def count(self, **filters: Any) -> int:
        """Count records matching the given column values.

        Returns:
            Total count
        """
        result = await self.session.execute(
            select(func.count()).select_from(self.model).filter_by(**filters)
        )
        return result.scalar_one()

    async def create(self, **kwargs: Any) -> T:
        """Create a new record.

        Args:
            **kwargs: Field values

        Returns:
            Created record
        """
        instance = self.model(**kwargs)
        self.session.add(instance)
        await self.session.flush()
        return instance

    async def update(self, id: UUID, **kwargs: Any) -> T | None:
        """Update a record by ID.

        Args:
            id: Record UUID
            **kwargs: Fields to update

        Returns:
            Updated record or None if not found
        """
        instance = await self.get_by_id(id)
        if instance is None:
            return None

        for key, value in kwargs.items():
            if hasattr(instance, key):
                setattr(instance, key, value)

        await self.session.flush()
        return instance

    async def update_where(self, values: dict[str, Any], *criteria: Any) -> int:
        """Apply ``values`` to every record matching ``criteria`` in one statement.

        Args:
            values: Column values to set
            *criteria: SQLAlchemy where-clauses

        Returns:
            Number of rows updated
        """
        result = await self.session.execute(
            update(self.model)
            .where(*criteria)
            .values(**values)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount

    async def delete(self, id: UUID) -> bool:
        """Delete a record by ID.

        Args:
            id: Record UUID

        Returns:
            True if deleted, False if not found
        """
        result = await self.session.execute(
            delete(self.model)
            .where(self.model.id == id)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount > 0
