"""
Base Repository

Shared persistence operations for the Folio tables. Repositories flush but
never commit; the session owner (request dependency or ``get_db_context``)
decides when the unit of work ends.
"""

from typing import Generic, TypeVar
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.elements import ColumnElement

from folio.models.orm.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """
    Generic repository over one ORM model.

    Subclasses set ``model`` and add table-specific queries.
    """

    model: type[ModelT]

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, id: UUID) -> ModelT | None:
        """
        Load one row by primary key.

        Args:
            id: Row UUID

        Returns:
            The row, or None if it does not exist
        """
        return await self.session.get(self.model, id)

    async def create(self, entity: ModelT) -> ModelT:
        """
        Insert a row and load its server-generated columns.

        Args:
            entity: New, transient instance

        Returns:
            The persisted instance
        """
        self.session.add(entity)
        await self.session.flush()
        await self.session.refresh(entity)
        return entity

    async def update(self, entity: ModelT) -> ModelT:
        """Flush pending attribute changes and reload timestamps."""
        await self.session.flush()
        await self.session.refresh(entity)
        return entity

    async def delete(self, entity: ModelT) -> None:
        await self.session.delete(entity)
        await self.session.flush()

    async def count(self, *filters: ColumnElement[bool]) -> int:
        """Count rows matching every filter."""
        query = select(func.count()).select_from(self.model)
        for condition in filters:
            query = query.where(condition)
        result = await self.session.execute(query)
        return result.scalar() or 0

    async def paginate(
        self,
        *,
        filters: list[ColumnElement[bool]] | None = None,
        search_columns: list[str] | None = None,
        search_term: str | None = None,
        order_by: ColumnElement | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> tuple[list[ModelT], int]:
        """
        One page of rows plus the total number of matches.

        Args:
            filters: Conditions every row must satisfy
            search_columns: Text columns searched for ``search_term``
            search_term: Case-insensitive substring; blank means no search
            order_by: Ordering clause (e.g. ``Model.created_at.desc()``)
            limit: Page size
            offset: Rows to skip

        Returns:
            Tuple of (rows on this page, total matches)
        """
        conditions = list(filters or [])

        if search_term and search_columns:
            pattern = f"%{search_term.strip()}%"
            conditions.append(
                or_(*(getattr(self.model, column).ilike(pattern) for column in search_columns))
            )

        total = await self.count(*conditions)

        query = select(self.model)
        for condition in conditions:
            query = query.where(condition)
        if order_by is not None:
            query = query.order_by(order_by)
        query = query.limit(limit).offset(offset)

        result = await self.session.execute(query)
        return list(result.scalars().all()), total
