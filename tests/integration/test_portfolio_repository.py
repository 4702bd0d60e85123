"""
Integration tests for the atomic view counter updates.

Runs against a temporary SQLite database. Concurrent callers each use their
own session, like concurrent requests do.
"""

import asyncio
from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest

from folio.core.database import get_db_context
from folio.repositories.portfolio import PortfolioRepository

WINDOW = timedelta(minutes=5)


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=UTC)


async def _increment_if_due(portfolio_id, now: datetime) -> bool:
    async with get_db_context() as db:
        return await PortfolioRepository(db).increment_views_if_due(
            portfolio_id, now, now - WINDOW
        )


async def _increment(portfolio_id, now: datetime) -> bool:
    async with get_db_context() as db:
        return await PortfolioRepository(db).increment_views(portfolio_id, now)


@pytest.mark.integration
class TestIncrementViewsIfDue:
    """Tests for the conditional increment."""

    async def test_first_view_counts(self, make_user, make_portfolio, fetch_portfolio):
        owner = await make_user()
        portfolio = await make_portfolio(owner, views=3)
        now = datetime.now(UTC)

        assert await _increment_if_due(portfolio.id, now) is True

        stored = await fetch_portfolio(portfolio.id)
        assert stored.views == 4
        assert abs(_as_utc(stored.last_view_counted_at) - now) < timedelta(seconds=1)

    async def test_view_inside_window_does_not_count(
        self, make_user, make_portfolio, fetch_portfolio
    ):
        owner = await make_user()
        now = datetime.now(UTC)
        portfolio = await make_portfolio(
            owner, views=3, last_view_counted_at=now - timedelta(minutes=2)
        )

        assert await _increment_if_due(portfolio.id, now) is False
        assert (await fetch_portfolio(portfolio.id)).views == 3

    async def test_view_after_window_counts(self, make_user, make_portfolio, fetch_portfolio):
        owner = await make_user()
        now = datetime.now(UTC)
        portfolio = await make_portfolio(
            owner, views=3, last_view_counted_at=now - WINDOW - timedelta(seconds=1)
        )

        assert await _increment_if_due(portfolio.id, now) is True
        assert (await fetch_portfolio(portfolio.id)).views == 4

    async def test_unpublished_does_not_count(self, make_user, make_portfolio, fetch_portfolio):
        owner = await make_user()
        portfolio = await make_portfolio(owner, published=False)

        assert await _increment_if_due(portfolio.id, datetime.now(UTC)) is False
        assert (await fetch_portfolio(portfolio.id)).views == 0

    async def test_counting_leaves_updated_at_alone(
        self, make_user, make_portfolio, fetch_portfolio
    ):
        owner = await make_user()
        portfolio = await make_portfolio(owner)
        before = (await fetch_portfolio(portfolio.id)).updated_at

        await _increment_if_due(portfolio.id, datetime.now(UTC) + timedelta(hours=1))

        assert (await fetch_portfolio(portfolio.id)).updated_at == before

    async def test_concurrent_views_in_one_window_count_once(
        self, make_user, make_portfolio, fetch_portfolio
    ):
        owner = await make_user()
        portfolio = await make_portfolio(owner, views=10)
        now = datetime.now(UTC)

        results = await asyncio.gather(
            *(_increment_if_due(portfolio.id, now) for _ in range(8))
        )

        assert results.count(True) == 1
        assert (await fetch_portfolio(portfolio.id)).views == 11


@pytest.mark.integration
class TestIncrementViews:
    """Tests for increment_views() and concurrent counting."""

    async def test_concurrent_increments_are_not_lost(
        self, make_user, make_portfolio, fetch_portfolio
    ):
        owner = await make_user()
        portfolio = await make_portfolio(owner, views=5)
        now = datetime.now(UTC)

        results = await asyncio.gather(*(_increment(portfolio.id, now) for _ in range(10)))

        assert all(results)
        assert (await fetch_portfolio(portfolio.id)).views == 15

    async def test_concurrent_conditional_increments_with_open_gate(
        self, make_user, make_portfolio, fetch_portfolio
    ):
        owner = await make_user()
        portfolio = await make_portfolio(owner, views=5)
        now = datetime.now(UTC)

        async def _count_with_zero_window() -> bool:
            async with get_db_context() as db:
                return await PortfolioRepository(db).increment_views_if_due(
                    portfolio.id, now, now
                )

        results = await asyncio.gather(*(_count_with_zero_window() for _ in range(10)))

        assert all(results)
        assert (await fetch_portfolio(portfolio.id)).views == 15

    async def test_open_gate_requests_each_count(
        self, make_user, make_portfolio, fetch_portfolio
    ):
        owner = await make_user()
        portfolio = await make_portfolio(owner)
        start = datetime.now(UTC)

        # Each request arrives a full window after the previous one
        for i in range(4):
            assert await _increment_if_due(portfolio.id, start + WINDOW * i) is True

        assert (await fetch_portfolio(portfolio.id)).views == 4

    async def test_missing_portfolio_reports_no_change(self, database):
        assert await _increment(uuid4(), datetime.now(UTC)) is False
