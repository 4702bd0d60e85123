"""
Portfolio Repository

Provides database operations for PortfolioPost, including the atomic view
counter updates.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from folio.models.orm.portfolio import PortfolioPost
from folio.repositories.base import BaseRepository


class PortfolioRepository(BaseRepository[PortfolioPost]):
    """Repository for PortfolioPost model operations."""

    model = PortfolioPost

    def __init__(self, session: AsyncSession):
        super().__init__(session)

    async def get_with_owner(self, portfolio_id: UUID) -> PortfolioPost | None:
        """
        Get a portfolio with its owner profile loaded.

        Args:
            portfolio_id: Portfolio UUID

        Returns:
            PortfolioPost or None if not found
        """
        result = await self.session.execute(
            select(PortfolioPost)
            .options(selectinload(PortfolioPost.owner))
            .where(PortfolioPost.id == portfolio_id)
        )
        return result.scalar_one_or_none()

    async def list_published(
        self, *, featured_only: bool = False, limit: int = 100, offset: int = 0
    ) -> list[PortfolioPost]:
        """
        List published portfolios, newest first.

        Args:
            featured_only: Restrict to featured portfolios
            limit: Maximum number of results
            offset: Number of results to skip

        Returns:
            List of portfolios with owners loaded
        """
        query = (
            select(PortfolioPost)
            .options(selectinload(PortfolioPost.owner))
            .where(PortfolioPost.published.is_(True))
        )
        if featured_only:
            query = query.where(PortfolioPost.featured.is_(True))
        query = query.order_by(PortfolioPost.created_at.desc()).limit(limit).offset(offset)

        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def list_featured(self, limit: int = 100) -> list[PortfolioPost]:
        """List published portfolios flagged as featured."""
        return await self.list_published(featured_only=True, limit=limit)

    async def list_by_owner(self, owner_id: UUID) -> list[PortfolioPost]:
        """List every portfolio of an owner regardless of publication state."""
        result = await self.session.execute(
            select(PortfolioPost)
            .options(selectinload(PortfolioPost.owner))
            .where(PortfolioPost.owner_id == owner_id)
            .order_by(PortfolioPost.created_at.desc())
        )
        return list(result.scalars().all())

    async def list_all(self) -> list[PortfolioPost]:
        """List every portfolio on the platform, newest first."""
        result = await self.session.execute(
            select(PortfolioPost)
            .options(selectinload(PortfolioPost.owner))
            .order_by(PortfolioPost.created_at.desc())
        )
        return list(result.scalars().all())

    async def count_published(self) -> int:
        """Count published portfolios."""
        return await self.count(PortfolioPost.published.is_(True))

    async def increment_views_if_due(
        self, portfolio_id: UUID, now: datetime, cutoff: datetime
    ) -> bool:
        """
        Count a view unless one was already counted after ``cutoff``.

        The cooldown check and the increment are a single conditional UPDATE,
        so concurrent callers cannot both pass the check.
        ``updated_at`` is reassigned to itself to keep its onupdate hook from
        firing: a counted view is not a content edit.

        Args:
            portfolio_id: Portfolio UUID
            now: Timestamp recorded as the last counted view
            cutoff: Latest previous count time that still allows counting

        Returns:
            True if the counter was incremented
        """
        stmt = (
            update(PortfolioPost)
            .where(
                PortfolioPost.id == portfolio_id,
                PortfolioPost.published.is_(True),
                or_(
                    PortfolioPost.last_view_counted_at.is_(None),
                    PortfolioPost.last_view_counted_at <= cutoff,
                ),
            )
            .values(
                views=PortfolioPost.views + 1,
                last_view_counted_at=now,
                updated_at=PortfolioPost.updated_at,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1  # type: ignore[attr-defined]

    async def increment_views(self, portfolio_id: UUID, now: datetime) -> bool:
        """
        Count a view without a cooldown check.

        Used when a per-viewer ledger has already decided the view is new.

        Returns:
            True if the counter was incremented
        """
        stmt = (
            update(PortfolioPost)
            .where(
                PortfolioPost.id == portfolio_id,
                PortfolioPost.published.is_(True),
            )
            .values(
                views=PortfolioPost.views + 1,
                last_view_counted_at=now,
                updated_at=PortfolioPost.updated_at,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1  # type: ignore[attr-defined]
