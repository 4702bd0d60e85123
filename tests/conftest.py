"""
Pytest fixtures for Folio API testing infrastructure.

This module provides:
1. Database fixtures (temporary SQLite file through aiosqlite)
2. In-process HTTP client
3. Data factories for users and portfolios
4. Authentication helpers
5. Mock fixtures
"""

import os
import sys
import tempfile
from collections.abc import AsyncGenerator, Awaitable, Callable
from datetime import datetime
from typing import Any
from unittest.mock import AsyncMock
from uuid import UUID, uuid4

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Add parent directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

# Set environment variables BEFORE any imports that might load settings
# This must happen at module level, not in fixtures, to run before test collection
_TEST_DB_DIR = tempfile.mkdtemp(prefix="folio_test_")

os.environ.setdefault("FOLIO_ENVIRONMENT", "testing")
os.environ.setdefault("FOLIO_DATABASE_URL", f"sqlite+aiosqlite:///{_TEST_DB_DIR}/folio_test.db")
os.environ.setdefault("FOLIO_REDIS_URL", "redis://localhost:6380/0")
os.environ.setdefault("FOLIO_VIEW_COOLDOWN_SECONDS", "300")

from folio.core.database import (  # noqa: E402
    close_db,
    create_all,
    drop_all,
    get_db_context,
    reset_db_state,
)
from folio.core.pubsub import MessageHub  # noqa: E402
from folio.core.security import encode_credential  # noqa: E402
from folio.main import app  # noqa: E402
from folio.models.contracts.portfolio import encode_json_list  # noqa: E402
from folio.models.enums import UserRole  # noqa: E402
from folio.models.orm.portfolio import PortfolioPost  # noqa: E402
from folio.models.orm.user import User  # noqa: E402
from folio.repositories.portfolio import PortfolioRepository  # noqa: E402
from folio.repositories.user import UserRepository  # noqa: E402


# ==================== DATABASE FIXTURES ====================


@pytest_asyncio.fixture
async def database() -> AsyncGenerator[None, None]:
    """
    Provide an empty schema for each test.

    Tables are created before the test and dropped afterwards. The engine
    uses NullPool, so nothing outlives pytest-asyncio's per-test event loop.
    """
    reset_db_state()
    await create_all()

    yield

    await drop_all()
    await close_db()


# ==================== HTTP CLIENT ====================


@pytest_asyncio.fixture
async def client(database) -> AsyncGenerator[AsyncClient, None]:
    """
    Create an async HTTP client for testing.

    Background tasks finish before ASGITransport returns the response, so
    view counts can be asserted right after a read.
    """
    # Fresh local-only hub per test; the lifespan never runs under ASGITransport
    app.state.message_hub = MessageHub()

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ==================== DATA FACTORIES ====================


@pytest_asyncio.fixture
async def make_user(database) -> Callable[..., Awaitable[User]]:
    """Factory creating committed users."""

    async def _make(
        username: str | None = None,
        role: UserRole = UserRole.USER,
        **profile: Any,
    ) -> User:
        username = username or f"user_{uuid4().hex[:8]}"
        async with get_db_context() as db:
            return await UserRepository(db).create_user(
                username=username,
                email=f"{username}@example.com",
                role=role,
                **profile,
            )

    return _make


@pytest_asyncio.fixture
async def make_portfolio(database) -> Callable[..., Awaitable[PortfolioPost]]:
    """Factory creating committed portfolios."""

    async def _make(
        owner: User,
        *,
        title: str = "Sample Project",
        published: bool = True,
        featured: bool = False,
        views: int = 0,
        last_view_counted_at: datetime | None = None,
        images: list[str] | str | None = None,
        tags: list[str] | str | None = None,
        **fields: Any,
    ) -> PortfolioPost:
        async with get_db_context() as db:
            portfolio = PortfolioPost(
                owner_id=owner.id,
                title=title,
                description=fields.pop("description", "A sample project"),
                content=fields.pop("content", "Long form write-up"),
                category=fields.pop("category", "web"),
                images=images if isinstance(images, str) else encode_json_list(images),
                tags=tags if isinstance(tags, str) else encode_json_list(tags),
                published=published,
                featured=featured,
                views=views,
                last_view_counted_at=last_view_counted_at,
                **fields,
            )
            return await PortfolioRepository(db).create(portfolio)

    return _make


@pytest_asyncio.fixture
async def fetch_portfolio(database) -> Callable[[UUID], Awaitable[PortfolioPost | None]]:
    """Read a portfolio back through a fresh session."""

    async def _fetch(portfolio_id: UUID) -> PortfolioPost | None:
        async with get_db_context() as db:
            return await PortfolioRepository(db).get_by_id(portfolio_id)

    return _fetch


# ==================== AUTH HELPERS ====================


@pytest.fixture
def auth_headers() -> Callable[[User], dict[str, str]]:
    """Build an Authorization header naming a user."""

    def _headers(user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {encode_credential(str(user.id))}"}

    return _headers


# ==================== MOCK FIXTURES ====================


@pytest.fixture
def mock_redis():
    """Mock Redis connection for unit tests."""
    mock = AsyncMock()
    mock.get = AsyncMock(return_value=None)
    mock.set = AsyncMock(return_value=True)
    mock.delete = AsyncMock(return_value=True)
    mock.publish = AsyncMock(return_value=1)
    mock.ping = AsyncMock(return_value=True)
    return mock


# ==================== MARKERS ====================


def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, mocked dependencies)")
    config.addinivalue_line(
        "markers", "integration: Integration tests (real database)"
    )
    config.addinivalue_line("markers", "slow: Tests that take >1 second")
