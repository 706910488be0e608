"""
Base CRUD operations for SQLAlchemy models.

Provides generic Create, Read, Update, Delete operations that can be
inherited and extended by model-specific CRUD classes.

Dependencies: sqlalchemy
System role: Foundation for all database CRUD operations
"""

from typing import Any, Generic, TypeVar

from sqlalchemy import delete, inspect
from sqlalchemy.ext.asyncio import AsyncSession

from docchat.boundary.db.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseCRUD(Generic[ModelT]):
    """
    Generic base class for CRUD operations keyed by a single-column primary key.

    Type Parameters:
        ModelT: SQLAlchemy model class inheriting from Base
    """

    def __init__(self, model: type[ModelT]) -> None:
        """
        Initialize CRUD with target model.

        Args:
            model: SQLAlchemy model class for database operations
        """
        self.model = model
        self._pk = inspect(model).primary_key[0]

    async def create(self, session: AsyncSession, **kwargs: Any) -> ModelT:
        """
        Create a new record in the database.

        Returns:
            Created model instance with defaults populated
        """
        instance = self.model(**kwargs)
        session.add(instance)
        await session.flush()
        await session.refresh(instance)
        return instance

    async def get_by_id(self, session: AsyncSession, id: Any) -> ModelT | None:
        """Retrieve a single record by primary key, None if absent."""
        return await session.get(self.model, id)

    async def update_by_id(self, session: AsyncSession, id: Any, **kwargs: Any) -> ModelT | None:
        """
        Update a record by primary key.

        Returns:
            Updated model instance if found, None otherwise
        """
        instance = await self.get_by_id(session, id)
        if instance is None:
            return None
        for field, value in kwargs.items():
            setattr(instance, field, value)
        await session.flush()
        return instance

    async def delete_by_id(self, session: AsyncSession, id: Any) -> bool:
        """
        Delete a record by primary key.

        Returns:
            True if record was deleted, False if not found
        """
        stmt = delete(self.model).where(self._pk == id)
        result = await session.execute(stmt)
        return result.rowcount > 0
