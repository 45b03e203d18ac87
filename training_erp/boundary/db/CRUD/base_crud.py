"""
Base CRUD operations for SQLAlchemy models.

Provides generic Create, Read, Update, Delete operations that can be
inherited and extended by model-specific CRUD classes.

Dependencies: sqlalchemy
System role: Foundation for all database CRUD operations
"""

from typing import Any, Generic, Sequence, TypeVar

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from training_erp.boundary.db.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseCRUD(Generic[ModelT]):
    """
    Generic base class for CRUD operations.

    Provides standard database operations that work with any SQLAlchemy model.
    Subclasses specify the model class and primary key column name and can
    override or extend these methods for model-specific behavior.

    Type Parameters:
        ModelT: SQLAlchemy model class inheriting from Base

    Attributes:
        model: The SQLAlchemy model class to operate on
        pk: The primary key column attribute
    """

    def __init__(self, model: type[ModelT], pk_name: str = "id") -> None:
        """
        Initialize CRUD with target model.

        Args:
            model: SQLAlchemy model class for database operations
            pk_name: Name of the primary key attribute on the model
        """
        self.model = model
        self.pk = getattr(model, pk_name)

    async def create(self, session: AsyncSession, **kwargs: Any) -> ModelT:
        """
        Create a new record in the database.

        Args:
            session: Async database session
            **kwargs: Model field values

        Returns:
            Created model instance with generated ID and timestamps
        """
        instance = self.model(**kwargs)
        session.add(instance)
        await session.flush()
        await session.refresh(instance)
        return instance

    async def get_by_id(self, session: AsyncSession, id: str) -> ModelT | None:
        """
        Retrieve a single record by primary key.

        Args:
            session: Async database session
            id: Primary key value

        Returns:
            Model instance if found, None otherwise
        """
        stmt = select(self.model).where(self.pk == id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_many(
        self,
        session: AsyncSession,
        ids: Sequence[str],
        lock: bool = False,
    ) -> Sequence[ModelT]:
        """
        Retrieve records whose primary key is in ids.

        Args:
            session: Async database session
            ids: Primary key values
            lock: Take row locks (SELECT ... FOR UPDATE) in key order

        Returns:
            Sequence of model instances found (missing ids are skipped)
        """
        if not ids:
            return []
        stmt = select(self.model).where(self.pk.in_(list(ids))).order_by(self.pk)
        if lock:
            stmt = stmt.with_for_update()
        result = await session.execute(stmt)
        return result.scalars().all()

    async def delete_by_id(self, session: AsyncSession, id: str) -> bool:
        """
        Delete a record by primary key.

        Args:
            session: Async database session
            id: Primary key value

        Returns:
            True if record was deleted, False if not found
        """
        stmt = delete(self.model).where(self.pk == id)
        result = await session.execute(stmt)
        return result.rowcount > 0

    async def exists(self, session: AsyncSession, id: str) -> bool:
        """
        Check if a record exists by primary key.

        Args:
            session: Async database session
            id: Primary key value

        Returns:
            True if record exists, False otherwise
        """
        stmt = select(self.pk).where(self.pk == id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def count(self, session: AsyncSession, *criteria: Any) -> int:
        """
        Count records matching optional WHERE criteria.

        Args:
            session: Async database session
            *criteria: SQLAlchemy boolean expressions

        Returns:
            Number of matching rows
        """
        stmt = select(func.count()).select_from(self.model)
        if criteria:
            stmt = stmt.where(*criteria)
        result = await session.execute(stmt)
        return int(result.scalar_one())
