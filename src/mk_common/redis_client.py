"""Redis client — holds per-activation session stock and nothing else.

Markets, shops, shop items and the item library live in PostgreSQL. One
client (and its connection pool) is shared by the whole process.
"""

import logging

import redis.asyncio as aioredis

from config.settings import settings

logger = logging.getLogger(__name__)

_client: aioredis.Redis | None = None


async def get_redis() -> aioredis.Redis:
    """Return the shared client, creating it on first use."""
    global _client  # noqa: PLW0603
    if _client is None:
        _client = aioredis.from_url(settings.REDIS_URL, decode_responses=True)
    return _client


async def ping_redis() -> None:
    """Fail fast at startup if Redis is unreachable."""
    client = await get_redis()
    await client.ping()
    logger.info("Redis reachable at %s", settings.REDIS_URL)


async def close_redis() -> None:
    global _client  # noqa: PLW0603
    if _client is not None:
        await _client.aclose()
        _client = None
