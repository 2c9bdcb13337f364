"""Tests for SessionStockService and the Redis-backed stock repository."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from src.mk_common.currency import Currency
from src.mk_session.application.stock_service import SESSION_TTL_SECONDS, SessionStockService
from src.mk_session.infrastructure.stock_store import RedisSessionStockRepository, stock_key
from src.mk_shop.domain.models import ShopItem
from tests.fakes import FakeStockRepo


def _item(item_id: str, stock: int | None) -> ShopItem:
    return ShopItem(
        id=item_id, shop_id="s-1", market_id="m-1", item_library_id="lib-1",
        price=Currency(gp=1), stock=stock, original_stock=stock,
        item_snapshot={"name": item_id},
    )


@pytest.fixture
def repo() -> FakeStockRepo:
    return FakeStockRepo()


@pytest.fixture
def service(repo) -> SessionStockService:
    return SessionStockService(repo)


class TestInitialize:
    @pytest.mark.asyncio
    async def test_one_entry_per_item(self, service, repo) -> None:
        await service.initialize_market_session("m-1", [_item("a", 3), _item("b", None)])
        assert await service.get_market_session_stock("m-1") == {"a": 3, "b": None}

    @pytest.mark.asyncio
    async def test_reinitialise_replaces(self, service) -> None:
        await service.initialize_market_session("m-1", [_item("a", 3)])
        await service.initialize_market_session("m-1", [_item("b", 1)])
        assert await service.get_market_session_stock("m-1") == {"b": 1}


class TestEffectiveStock:
    def test_session_value_wins(self) -> None:
        assert SessionStockService.effective_stock(_item("a", 5), {"a": 2}) == 2

    def test_unlimited_session_value(self) -> None:
        assert SessionStockService.effective_stock(_item("a", 5), {"a": None}) is None

    def test_falls_back_to_persisted(self) -> None:
        assert SessionStockService.effective_stock(_item("a", 5), {}) == 5


class TestDecrease:
    @pytest.mark.asyncio
    async def test_decrements(self, service) -> None:
        await service.initialize_market_session("m-1", [_item("a", 3)])
        assert await service.decrease_stock("m-1", "a", 2) is True
        assert (await service.get_market_session_stock("m-1"))["a"] == 1

    @pytest.mark.asyncio
    async def test_refuses_when_short(self, service) -> None:
        await service.initialize_market_session("m-1", [_item("a", 1)])
        assert await service.decrease_stock("m-1", "a", 2) is False
        assert (await service.get_market_session_stock("m-1"))["a"] == 1

    @pytest.mark.asyncio
    async def test_zero_stock_refuses_single(self, service) -> None:
        await service.initialize_market_session("m-1", [_item("a", 0)])
        assert await service.decrease_stock("m-1", "a") is False

    @pytest.mark.asyncio
    async def test_unlimited_always_succeeds(self, service) -> None:
        await service.initialize_market_session("m-1", [_item("a", None)])
        assert await service.decrease_stock("m-1", "a", 1000) is True
        assert (await service.get_market_session_stock("m-1"))["a"] is None

    @pytest.mark.asyncio
    async def test_missing_entry_succeeds(self, service) -> None:
        assert await service.decrease_stock("m-1", "ghost") is True


class TestSeedAndClear:
    @pytest.mark.asyncio
    async def test_seed_only_when_missing(self, service) -> None:
        await service.initialize_market_session("m-1", [_item("a", 1)])
        await service.seed_item("m-1", _item("a", 9))
        await service.seed_item("m-1", _item("b", 4))
        assert await service.get_market_session_stock("m-1") == {"a": 1, "b": 4}

    @pytest.mark.asyncio
    async def test_clear(self, service) -> None:
        await service.initialize_market_session("m-1", [_item("a", 1)])
        await service.clear_market_session("m-1")
        assert await service.get_market_session_stock("m-1") == {}


class TestRedisRepository:
    @pytest.fixture
    def redis(self) -> MagicMock:
        redis = MagicMock()
        pipe = MagicMock()
        pipe.execute = AsyncMock(return_value=[])
        redis.pipe = pipe
        redis.pipeline.return_value.__aenter__ = AsyncMock(return_value=pipe)
        redis.pipeline.return_value.__aexit__ = AsyncMock(return_value=False)
        redis.hgetall = AsyncMock()
        redis.hget = AsyncMock()
        redis.hset = AsyncMock()
        redis.delete = AsyncMock()
        return redis

    @pytest.mark.asyncio
    async def test_replace_all_encodes_unlimited(self, redis) -> None:
        repo = RedisSessionStockRepository(redis)
        await repo.replace_all("m-1", {"a": 3, "b": None}, SESSION_TTL_SECONDS)

        redis.pipe.delete.assert_called_once_with(stock_key("m-1"))
        redis.pipe.hset.assert_called_once_with(
            "session_stock:m-1", mapping={"a": "3", "b": "unlimited"}
        )
        redis.pipe.expire.assert_called_once_with("session_stock:m-1", SESSION_TTL_SECONDS)
        redis.pipe.execute.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_get_all_decodes(self, redis) -> None:
        redis.hgetall.return_value = {"a": "2", "b": "unlimited"}
        repo = RedisSessionStockRepository(redis)
        assert await repo.get_all("m-1") == {"a": 2, "b": None}

    @pytest.mark.asyncio
    async def test_get_entry_missing(self, redis) -> None:
        redis.hget.return_value = None
        repo = RedisSessionStockRepository(redis)
        assert await repo.get_entry("m-1", "a") == (False, None)

    @pytest.mark.asyncio
    async def test_set_entry(self, redis) -> None:
        repo = RedisSessionStockRepository(redis)
        await repo.set_entry("m-1", "a", 4)
        redis.hset.assert_awaited_once_with("session_stock:m-1", "a", "4")

    def test_ttl_outlives_window(self) -> None:
        assert SESSION_TTL_SECONDS > 3 * 3600
