"""Unit tests for the raw-SQL repositories using a MagicMock AsyncSession."""

import json
import uuid
from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.mk_common.currency import Currency
from src.mk_library.infrastructure.persistence import LibraryRepository
from src.mk_market.infrastructure.persistence import MarketRepository
from src.mk_session.domain.models import Transaction
from src.mk_session.infrastructure.persistence import PlayerSessionRepository
from src.mk_shop.infrastructure.persistence import ShopItemRepository, ShopRepository


def _result(*, one=None, many=None, rowcount=None, scalar=None) -> MagicMock:
    result = MagicMock()
    result.fetchone.return_value = one
    result.fetchall.return_value = many or []
    result.rowcount = rowcount
    result.scalar_one.return_value = scalar
    return result


def _market_row(**kwargs) -> MagicMock:
    row = MagicMock()
    row.id = kwargs.get("id", uuid.uuid4())
    row.dm_id = kwargs.get("dm_id", uuid.uuid4())
    row.name = kwargs.get("name", "Goblin Bazaar")
    row.description = ""
    row.access_code = kwargs.get("access_code", "goblin-bazaar-k3x9qa")
    row.is_active = kwargs.get("is_active", False)
    row.active_until = kwargs.get("active_until")
    row.created_at = datetime.now(UTC)
    row.updated_at = datetime.now(UTC)
    return row


def _item_row(**kwargs) -> MagicMock:
    row = MagicMock()
    row.id = uuid.uuid4()
    row.shop_id = uuid.uuid4()
    row.market_id = uuid.uuid4()
    row.item_library_id = uuid.uuid4()
    row.price_gp, row.price_sp, row.price_cp = kwargs.get("price", (15, 0, 0))
    row.stock = kwargs.get("stock", 3)
    row.original_stock = kwargs.get("original_stock", 3)
    # asyncpg without a jsonb codec returns text
    row.item_snapshot = kwargs.get("item_snapshot", json.dumps({"name": "Longsword"}))
    row.created_at = None
    row.updated_at = None
    return row


@pytest.fixture
def db() -> MagicMock:
    return MagicMock()


class TestMarketRepository:
    async def test_row_mapping_stringifies_uuids(self, db) -> None:
        market_id = uuid.uuid4()
        db.execute = AsyncMock(return_value=_result(one=_market_row(id=market_id)))

        market = await MarketRepository().get_by_id(db, str(market_id))

        assert market.id == str(market_id)
        assert isinstance(market.dm_id, str)
        assert market.is_active is False

    async def test_missing_returns_none(self, db) -> None:
        db.execute = AsyncMock(return_value=_result(one=None))
        assert await MarketRepository().get_by_access_code(db, "nope") is None

    async def test_set_active_passes_deadline(self, db) -> None:
        until = datetime(2026, 1, 1, 21, 0, tzinfo=UTC)
        db.execute = AsyncMock(
            return_value=_result(one=_market_row(is_active=True, active_until=until))
        )

        market = await MarketRepository().set_active(db, "mkt-1", until)

        params = db.execute.call_args.args[1]
        assert params == {"market_id": "mkt-1", "active_until": until}
        assert market.active_until == until

    async def test_count(self, db) -> None:
        db.execute = AsyncMock(return_value=_result(scalar=4))
        assert await MarketRepository().count_by_dm(db, "dm-1") == 4


class TestShopRepositories:
    async def test_item_row_mapping(self, db) -> None:
        db.execute = AsyncMock(return_value=_result(one=_item_row(price=(0, 5, 2), stock=None)))

        item = await ShopItemRepository().get_by_id(db, "si-1")

        assert item.price == Currency(sp=5, cp=2)
        assert item.stock is None
        assert item.item_snapshot == {"name": "Longsword"}
        assert item.name == "Longsword"

    async def test_create_serialises_snapshot(self, db) -> None:
        db.execute = AsyncMock(return_value=_result(one=_item_row()))

        await ShopItemRepository().create(
            db, "shop-1", "mkt-1", "lib-1", Currency(gp=15), 3, {"name": "Longsword"}
        )

        params = db.execute.call_args.args[1]
        assert (params["gp"], params["sp"], params["cp"]) == (15, 0, 0)
        assert params["stock"] == 3
        assert json.loads(params["item_snapshot"]) == {"name": "Longsword"}

    async def test_restore_returns_rowcount(self, db) -> None:
        db.execute = AsyncMock(return_value=_result(rowcount=7))
        assert await ShopItemRepository().restore_original_stock(db, "mkt-1") == 7

    async def test_bulk_delete_handles_missing_rowcount(self, db) -> None:
        db.execute = AsyncMock(return_value=_result(rowcount=None))
        assert await ShopRepository().delete_by_market(db, "mkt-1") == 0

    async def test_shop_update_omits_unsent_tags(self, db) -> None:
        row = MagicMock()
        row.id, row.market_id = uuid.uuid4(), uuid.uuid4()
        row.name, row.category, row.location, row.description = "Forge", "blacksmith", "", ""
        row.shopkeeper, row.tags, row.display_order = None, ["weapons"], 0
        row.created_at = row.updated_at = None
        db.execute = AsyncMock(return_value=_result(one=row))

        shop = await ShopRepository().update(db, "shop-1", {"name": "Forge"})

        assert db.execute.call_args.args[1]["tags"] is None
        assert shop.tags == ["weapons"]


class TestLibraryRepository:
    async def test_create_copies_type_and_name(self, db) -> None:
        row = MagicMock()
        row.id, row.dm_id = uuid.uuid4(), uuid.uuid4()
        row.item = {"type": "gear", "name": "Rope"}
        row.source, row.official_id = "official", "rope"
        row.created_at = row.updated_at = None
        db.execute = AsyncMock(return_value=_result(one=row))

        item = await LibraryRepository().create(
            db, "dm-1", {"type": "gear", "name": "Rope"}, "official", "rope"
        )

        params = db.execute.call_args.args[1]
        assert (params["item_type"], params["name"]) == ("gear", "Rope")
        assert item.item_type == "gear"

    async def test_usage(self, db) -> None:
        a, b = uuid.uuid4(), uuid.uuid4()
        rows = [MagicMock(market_id=a, is_active=False), MagicMock(market_id=b, is_active=True),
                MagicMock(market_id=a, is_active=False)]
        db.execute = AsyncMock(return_value=_result(many=rows))

        usage = await LibraryRepository().get_usage(db, "lib-1")

        assert usage.shop_count == 3
        assert usage.in_active_market is True
        assert usage.market_ids == sorted([str(a), str(b)])


class TestPlayerSessionRepository:
    async def test_transactions_decoded(self, db) -> None:
        row = MagicMock()
        row.id, row.market_id = uuid.uuid4(), uuid.uuid4()
        row.player_name = "Thorin"
        row.entered_at = row.last_active_at = datetime.now(UTC)
        row.transactions = json.dumps([
            {"type": "buy", "item_name": "Rope", "quantity": 2,
             "timestamp": "2026-01-01T18:00:00+00:00"},
        ])
        db.execute = AsyncMock(return_value=_result(one=row))

        session = await PlayerSessionRepository().get_by_id(db, "ps-1")

        (t,) = session.transactions
        assert (t.type, t.item_name, t.quantity) == ("buy", "Rope", 2)
        assert t.timestamp == datetime(2026, 1, 1, 18, 0, tzinfo=UTC)

    async def test_append_sends_single_element_array(self, db) -> None:
        db.execute = AsyncMock(return_value=_result(rowcount=1))
        ts = datetime(2026, 1, 1, 18, 0, tzinfo=UTC)

        found = await PlayerSessionRepository().append_transaction(
            db, "ps-1", Transaction(type="sell", item_name="Gem", quantity=1, timestamp=ts)
        )

        params = db.execute.call_args.args[1]
        assert found is True
        assert json.loads(params["entry"]) == [
            {"type": "sell", "item_name": "Gem", "quantity": 1, "timestamp": ts.isoformat()}
        ]
        assert params["timestamp"] == ts

    async def test_append_to_missing_session(self, db) -> None:
        db.execute = AsyncMock(return_value=_result(rowcount=0))
        ts = datetime.now(UTC)
        assert await PlayerSessionRepository().append_transaction(
            db, "nope", Transaction(type="buy", item_name="X", quantity=1, timestamp=ts)
        ) is False
