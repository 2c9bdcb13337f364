"""Unit tests for PurchaseService: accept, reject, and stock bookkeeping."""

from datetime import datetime, timedelta
from unittest.mock import AsyncMock

import pytest

from src.mk_common.currency import Currency
from src.mk_common.datetime_utils import utc_now
from src.mk_common.errors import (
    CannotAffordError,
    MarketNotActiveError,
    MarketNotFoundError,
    OutOfStockError,
    PlayerSessionNotFoundError,
    ShopItemNotFoundError,
)
from src.mk_market.application.schemas import CreateMarketRequest
from src.mk_market.application.service import MarketLifecycleService
from src.mk_session.application.activity_service import PlayerActivityService
from src.mk_session.application.purchase_service import PurchaseService
from src.mk_session.application.schemas import PurchaseRequest, PurseIn
from src.mk_session.application.stock_service import SessionStockService
from tests.fakes import (
    FakeMarketRepo,
    FakePlayerSessionRepo,
    FakeShopItemRepo,
    FakeShopRepo,
    FakeStockRepo,
)

DM = "dm-1"


class Clock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class World:
    def __init__(self) -> None:
        self.clock = Clock(utc_now())
        self.markets = FakeMarketRepo()
        self.shops = FakeShopRepo()
        self.items = FakeShopItemRepo()
        self.stock_repo = FakeStockRepo()
        self.sessions = FakePlayerSessionRepo()
        self.stock = SessionStockService(self.stock_repo)
        self.activity = PlayerActivityService(self.sessions)
        self.market_service = MarketLifecycleService(
            repo=self.markets,
            shop_repo=self.shops,
            item_repo=self.items,
            stock_service=self.stock,
            activity_service=self.activity,
            clock=self.clock,
        )
        self.service = PurchaseService(
            market_service=self.market_service,
            item_repo=self.items,
            stock_service=self.stock,
            activity_service=self.activity,
        )

    async def open_market(self, db, price=Currency(gp=15), stock=3, activate=True):
        market = await self.market_service.create_market(
            db, DM, CreateMarketRequest(name="Goblin Bazaar")
        )
        shop = await self.shops.create(db, market.id, {"name": "Forge", "category": "blacksmith"}, 0)
        item = await self.items.create(
            db, shop.id, market.id, "lib-1", price, stock, {"name": "Longsword"}
        )
        if activate:
            market = await self.market_service.activate_market(db, DM, market.id)
        return market, item


@pytest.fixture
def world() -> World:
    return World()


def _buy(item_id: str, gold: int = 0, silver: int = 0, copper: int = 0, **kw) -> PurchaseRequest:
    return PurchaseRequest(
        shop_item_id=item_id,
        currency=PurseIn(gold=gold, silver=silver, copper=copper),
        **kw,
    )


class TestAccept:
    @pytest.mark.asyncio
    async def test_purchase_returns_new_purse_and_decrements(self, world, db) -> None:
        market, item = await world.open_market(db)

        result = await world.service.purchase(db, market.access_code, _buy(item.id, gold=20))

        assert result.new_currency == Currency(gp=5)
        assert result.line_total == Currency(gp=15)
        assert result.remaining_stock == 2
        assert world.stock_repo.hashes[market.id][item.id] == 2
        # persisted baseline untouched while the market is open
        assert world.items.rows[item.id].stock == 3

    @pytest.mark.asyncio
    async def test_quantity_multiplies_price(self, world, db) -> None:
        market, item = await world.open_market(db, price=Currency(sp=5))
        result = await world.service.purchase(
            db, market.access_code, _buy(item.id, gold=2, quantity=3)
        )
        assert result.line_total == Currency(sp=15)
        assert result.new_currency == Currency(sp=5)
        assert result.remaining_stock == 0

    @pytest.mark.asyncio
    async def test_change_made_across_denominations(self, world, db) -> None:
        market, item = await world.open_market(db, price=Currency(sp=3, cp=5))
        result = await world.service.purchase(db, market.access_code, _buy(item.id, gold=1))
        assert result.new_currency == Currency(sp=6, cp=5)

    @pytest.mark.asyncio
    async def test_unlimited_stock(self, world, db) -> None:
        market, item = await world.open_market(db, stock=None)
        for _ in range(5):
            result = await world.service.purchase(db, market.access_code, _buy(item.id, gold=15))
        assert result.remaining_stock is None

    @pytest.mark.asyncio
    async def test_item_bound_after_activation_is_seeded(self, world, db) -> None:
        market, first = await world.open_market(db)
        late = await world.items.create(
            db, first.shop_id, market.id, "lib-2", Currency(gp=1), 2, {"name": "Dagger"}
        )
        assert late.id not in world.stock_repo.hashes[market.id]

        result = await world.service.purchase(db, market.access_code, _buy(late.id, gold=1))

        assert result.remaining_stock == 1
        assert world.stock_repo.hashes[market.id][late.id] == 1

    @pytest.mark.asyncio
    async def test_purchase_logged_to_session(self, world, db) -> None:
        market, item = await world.open_market(db)
        session = await world.activity.create_session(db, market.id, "Thorin")

        await world.service.purchase(
            db, market.access_code, _buy(item.id, gold=40, quantity=2, session_id=session.id)
        )

        logged = world.sessions.rows[session.id].transactions
        assert [(t.type, t.item_name, t.quantity) for t in logged] == [("buy", "Longsword", 2)]

    @pytest.mark.asyncio
    async def test_logging_failure_does_not_undo_sale(self, world, db) -> None:
        market, item = await world.open_market(db)
        world.activity.add_transaction = AsyncMock(side_effect=PlayerSessionNotFoundError("gone"))

        result = await world.service.purchase(
            db, market.access_code, _buy(item.id, gold=15, session_id="gone")
        )

        assert result.remaining_stock == 2


class TestReject:
    @pytest.mark.asyncio
    async def test_cannot_afford_changes_nothing(self, world, db) -> None:
        market, item = await world.open_market(db)
        with pytest.raises(CannotAffordError):
            await world.service.purchase(db, market.access_code, _buy(item.id, gold=14, silver=9))
        assert world.stock_repo.hashes[market.id][item.id] == 3

    @pytest.mark.asyncio
    async def test_out_of_stock(self, world, db) -> None:
        market, item = await world.open_market(db, stock=1)
        await world.service.purchase(db, market.access_code, _buy(item.id, gold=15))
        with pytest.raises(OutOfStockError):
            await world.service.purchase(db, market.access_code, _buy(item.id, gold=15))
        assert world.stock_repo.hashes[market.id][item.id] == 0

    @pytest.mark.asyncio
    async def test_quantity_beyond_stock(self, world, db) -> None:
        market, item = await world.open_market(db, price=Currency(cp=1), stock=2)
        with pytest.raises(OutOfStockError):
            await world.service.purchase(db, market.access_code, _buy(item.id, gold=1, quantity=3))
        assert world.stock_repo.hashes[market.id][item.id] == 2

    @pytest.mark.asyncio
    async def test_inactive_market(self, world, db) -> None:
        market, item = await world.open_market(db, activate=False)
        with pytest.raises(MarketNotActiveError):
            await world.service.purchase(db, market.access_code, _buy(item.id, gold=15))

    @pytest.mark.asyncio
    async def test_expired_market_is_closed_on_purchase(self, world, db) -> None:
        market, item = await world.open_market(db)
        await world.service.purchase(db, market.access_code, _buy(item.id, gold=15))
        world.clock.now += timedelta(hours=3, seconds=1)

        with pytest.raises(MarketNotActiveError):
            await world.service.purchase(db, market.access_code, _buy(item.id, gold=15))
        assert market.id not in world.stock_repo.hashes
        assert world.items.rows[item.id].stock == 3

    @pytest.mark.asyncio
    async def test_unknown_access_code(self, world, db) -> None:
        with pytest.raises(MarketNotFoundError):
            await world.service.purchase(db, "nowhere-000000", _buy("x", gold=1))

    @pytest.mark.asyncio
    async def test_item_from_another_market(self, world, db) -> None:
        market, _ = await world.open_market(db)
        stray = await world.items.create(
            db, "shop-x", "mkt-elsewhere", "lib-9", Currency(gp=1), None, {"name": "Stray"}
        )
        with pytest.raises(ShopItemNotFoundError):
            await world.service.purchase(db, market.access_code, _buy(stray.id, gold=1))
