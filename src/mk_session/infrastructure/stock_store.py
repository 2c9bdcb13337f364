"""RedisSessionStockRepository — per-activation stock counters.

One hash per market: session_stock:{market_id}, field = shop item id,
value = remaining count or the literal "unlimited". The hash TTL only
garbage-collects sessions nobody deactivated; expiry itself is decided by
markets.active_until.
"""

import redis.asyncio as aioredis

from src.mk_common.redis_client import get_redis
from src.mk_session.domain.models import SessionStock

UNLIMITED = "unlimited"


def stock_key(market_id: str) -> str:
    return f"session_stock:{market_id}"


def _encode(value: int | None) -> str:
    return UNLIMITED if value is None else str(value)


def _decode(raw: str) -> int | None:
    return None if raw == UNLIMITED else int(raw)


class RedisSessionStockRepository:
    def __init__(self, redis: aioredis.Redis | None = None) -> None:
        self._redis = redis

    async def _client(self) -> aioredis.Redis:
        if self._redis is None:
            self._redis = await get_redis()
        return self._redis

    async def replace_all(
        self, market_id: str, entries: SessionStock, ttl_seconds: int
    ) -> None:
        redis = await self._client()
        key = stock_key(market_id)
        async with redis.pipeline(transaction=True) as pipe:
            pipe.delete(key)
            if entries:
                pipe.hset(key, mapping={k: _encode(v) for k, v in entries.items()})
                pipe.expire(key, ttl_seconds)
            await pipe.execute()

    async def get_all(self, market_id: str) -> SessionStock:
        redis = await self._client()
        raw = await redis.hgetall(stock_key(market_id))
        return {field: _decode(value) for field, value in raw.items()}

    async def get_entry(
        self, market_id: str, shop_item_id: str
    ) -> tuple[bool, int | None]:
        redis = await self._client()
        raw = await redis.hget(stock_key(market_id), shop_item_id)
        if raw is None:
            return False, None
        return True, _decode(raw)

    async def set_entry(
        self, market_id: str, shop_item_id: str, value: int | None
    ) -> None:
        redis = await self._client()
        await redis.hset(stock_key(market_id), shop_item_id, _encode(value))

    async def clear(self, market_id: str) -> None:
        redis = await self._client()
        await redis.delete(stock_key(market_id))
