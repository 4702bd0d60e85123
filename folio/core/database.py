"""
Database Engine and Sessions

One async engine per process, created lazily from settings. PostgreSQL runs
through asyncpg with a connection pool; SQLite (aiosqlite) runs without one,
so a connection never outlives the event loop that opened it.

Request handlers get a session through ``DbSession``; everything else
(background view counting, startup, tests) uses ``get_db_context()``.
Both commit when the block finishes cleanly and roll back otherwise.
"""

import ssl
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Annotated, Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from fastapi import Depends
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from folio.config import Settings, get_settings
from folio.models.orm.base import Base

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def _ssl_for_mode(sslmode: str) -> ssl.SSLContext | str | None:
    """Map a libpq ``sslmode`` onto the ``ssl`` argument asyncpg understands."""
    if sslmode == "prefer":
        return "prefer"
    if sslmode not in ("require", "verify-ca", "verify-full"):
        return None

    context = ssl.create_default_context()
    if sslmode != "verify-full":
        context.check_hostname = False
    if sslmode == "require":
        context.verify_mode = ssl.CERT_NONE
    return context


def split_ssl_options(url: str) -> tuple[str, dict[str, Any]]:
    """
    Move ``sslmode`` out of a PostgreSQL URL and into asyncpg connect args.

    asyncpg rejects ``sslmode`` as a query parameter, but managed Postgres
    providers hand out URLs that carry it.

    Args:
        url: Database URL, possibly with ``?sslmode=...``

    Returns:
        Tuple of (URL without sslmode, connect_args)
    """
    parts = urlsplit(url)
    query = parse_qsl(parts.query, keep_blank_values=True)
    modes = [value for key, value in query if key == "sslmode"]
    if not modes:
        return url, {}

    remaining = [(key, value) for key, value in query if key != "sslmode"]
    cleaned = urlunsplit(parts._replace(query=urlencode(remaining)))

    ssl_arg = _ssl_for_mode(modes[-1])
    return cleaned, ({"ssl": ssl_arg} if ssl_arg is not None else {})


def get_engine(settings: Settings | None = None) -> AsyncEngine:
    """
    Return the process-wide engine, creating it on first use.

    Args:
        settings: Settings to build from (defaults to ``get_settings()``)
    """
    global _engine

    if _engine is not None:
        return _engine

    settings = settings or get_settings()
    url = settings.database_url

    if url.startswith("sqlite"):
        _engine = create_async_engine(url, echo=settings.debug, poolclass=NullPool)
    else:
        url, connect_args = split_ssl_options(url)
        _engine = create_async_engine(
            url,
            echo=settings.debug,
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
            pool_pre_ping=True,
            connect_args=connect_args,
        )

    return _engine


def get_session_factory(settings: Settings | None = None) -> async_sessionmaker[AsyncSession]:
    """Return the session factory bound to the process-wide engine."""
    global _session_factory

    if _session_factory is None:
        _session_factory = async_sessionmaker(
            get_engine(settings),
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    return _session_factory


@asynccontextmanager
async def get_db_context() -> AsyncGenerator[AsyncSession, None]:
    """
    Session scope for work outside a request.

    Usage:
        async with get_db_context() as db:
            await PortfolioRepository(db).increment_views(portfolio_id, now)
    """
    async with get_session_factory()() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding a request-scoped session."""
    async with get_db_context() as session:
        yield session


DbSession = Annotated[AsyncSession, Depends(get_db)]


async def init_db() -> None:
    """Open one connection at startup so a bad URL fails fast."""
    async with get_engine().connect():
        pass


async def create_all() -> None:
    """Create missing tables from the ORM metadata."""
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_all() -> None:
    """Drop every Folio table (tests only)."""
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def close_db() -> None:
    """Dispose of the engine; the next access builds a new one."""
    global _engine, _session_factory

    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None


def reset_db_state() -> None:
    """Forget the engine without disposing it, so changed settings take effect."""
    global _engine, _session_factory
    _engine = None
    _session_factory = None
