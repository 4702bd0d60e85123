"""
Redis Client

One lazily created ``redis.asyncio`` client per process, shared by the
recent-viewer ledger and the message hub. The connect timeout is short so
an unreachable Redis is reported quickly and callers fall back.
"""

import redis.asyncio as redis

from folio.config import get_settings

_client: redis.Redis | None = None


async def get_redis() -> redis.Redis:
    """Return the shared client, connecting lazily on first command."""
    global _client

    if _client is None:
        settings = get_settings()
        _client = redis.from_url(
            settings.redis_url,
            encoding="utf-8",
            decode_responses=True,
            socket_connect_timeout=settings.redis_connect_timeout_seconds,
        )

    return _client


async def close_redis() -> None:
    """Close the shared client at shutdown."""
    global _client

    if _client is not None:
        await _client.aclose()
        _client = None
