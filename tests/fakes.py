"""In-memory repositories conforming to the repository Protocols.

Used by service-level scenario tests so a whole DM/player flow can run
without PostgreSQL or Redis.
"""

import itertools
from dataclasses import replace
from datetime import datetime
from typing import Any

from src.mk_common.currency import Currency
from src.mk_common.datetime_utils import utc_now
from src.mk_library.domain.models import ItemUsage, LibraryItem
from src.mk_market.domain.models import Market
from src.mk_session.domain.models import PlayerSession, SessionStock, Transaction
from src.mk_shop.domain.models import Shop, ShopItem

_ids = itertools.count(1)


def _new_id(prefix: str) -> str:
    return f"{prefix}-{next(_ids)}"


class FakeMarketRepo:
    def __init__(self) -> None:
        self.rows: dict[str, Market] = {}

    async def count_by_dm(self, db, dm_id: str) -> int:
        return sum(1 for m in self.rows.values() if m.dm_id == dm_id)

    async def create(self, db, dm_id, name, description, access_code) -> Market:
        m = Market(
            id=_new_id("mkt"), dm_id=dm_id, name=name, description=description,
            access_code=access_code, created_at=utc_now(), updated_at=utc_now(),
        )
        self.rows[m.id] = m
        return replace(m)

    async def get_by_id(self, db, market_id) -> Market | None:
        m = self.rows.get(market_id)
        return replace(m) if m else None

    async def get_by_access_code(self, db, access_code) -> Market | None:
        for m in self.rows.values():
            if m.access_code == access_code:
                return replace(m)
        return None

    async def get_active_by_dm(self, db, dm_id) -> Market | None:
        for m in self.rows.values():
            if m.dm_id == dm_id and m.is_active:
                return replace(m)
        return None

    async def list_by_dm(self, db, dm_id) -> list[Market]:
        return [replace(m) for m in self.rows.values() if m.dm_id == dm_id]

    async def update_details(self, db, market_id, name, description) -> Market | None:
        m = self.rows.get(market_id)
        if m is None:
            return None
        if name is not None:
            m.name = name
        if description is not None:
            m.description = description
        return replace(m)

    async def set_active(self, db, market_id, active_until: datetime) -> Market | None:
        m = self.rows.get(market_id)
        if m is None:
            return None
        m.is_active, m.active_until = True, active_until
        return replace(m)

    async def set_inactive(self, db, market_id) -> Market | None:
        m = self.rows.get(market_id)
        if m is None:
            return None
        m.is_active, m.active_until = False, None
        return replace(m)

    async def delete(self, db, market_id) -> None:
        self.rows.pop(market_id, None)


class FakeShopRepo:
    def __init__(self) -> None:
        self.rows: dict[str, Shop] = {}

    async def count_by_market(self, db, market_id) -> int:
        return sum(1 for s in self.rows.values() if s.market_id == market_id)

    async def create(self, db, market_id, fields: dict[str, Any], display_order: int) -> Shop:
        s = Shop(
            id=_new_id("shop"), market_id=market_id, name=fields["name"],
            category=fields["category"], location=fields.get("location", ""),
            description=fields.get("description", ""), shopkeeper=fields.get("shopkeeper"),
            tags=list(fields.get("tags") or []), display_order=display_order,
        )
        self.rows[s.id] = s
        return replace(s)

    async def get_by_id(self, db, shop_id) -> Shop | None:
        s = self.rows.get(shop_id)
        return replace(s) if s else None

    async def list_by_market(self, db, market_id) -> list[Shop]:
        shops = [replace(s) for s in self.rows.values() if s.market_id == market_id]
        return sorted(shops, key=lambda s: s.display_order)

    async def update(self, db, shop_id, fields) -> Shop | None:
        s = self.rows.get(shop_id)
        if s is None:
            return None
        for key, value in fields.items():
            if value is not None:
                setattr(s, key, value)
        return replace(s)

    async def set_order(self, db, shop_id, display_order) -> None:
        self.rows[shop_id].display_order = display_order

    async def delete(self, db, shop_id) -> None:
        self.rows.pop(shop_id, None)

    async def delete_by_market(self, db, market_id) -> int:
        doomed = [k for k, s in self.rows.items() if s.market_id == market_id]
        for k in doomed:
            del self.rows[k]
        return len(doomed)


class FakeShopItemRepo:
    def __init__(self) -> None:
        self.rows: dict[str, ShopItem] = {}

    def _drop(self, pred) -> int:
        doomed = [k for k, i in self.rows.items() if pred(i)]
        for k in doomed:
            del self.rows[k]
        return len(doomed)

    async def count_by_shop(self, db, shop_id) -> int:
        return sum(1 for i in self.rows.values() if i.shop_id == shop_id)

    async def create(
        self, db, shop_id, market_id, item_library_id, price: Currency, stock, item_snapshot
    ) -> ShopItem:
        i = ShopItem(
            id=_new_id("si"), shop_id=shop_id, market_id=market_id,
            item_library_id=item_library_id, price=price, stock=stock,
            original_stock=stock, item_snapshot=dict(item_snapshot),
        )
        self.rows[i.id] = i
        return replace(i)

    async def get_by_id(self, db, shop_item_id) -> ShopItem | None:
        i = self.rows.get(shop_item_id)
        return replace(i) if i else None

    async def list_by_shop(self, db, shop_id) -> list[ShopItem]:
        return [replace(i) for i in self.rows.values() if i.shop_id == shop_id]

    async def list_by_market(self, db, market_id) -> list[ShopItem]:
        return [replace(i) for i in self.rows.values() if i.market_id == market_id]

    async def update_price(self, db, shop_item_id, price) -> None:
        self.rows[shop_item_id].price = price

    async def update_stock(self, db, shop_item_id, stock) -> None:
        self.rows[shop_item_id].stock = stock
        self.rows[shop_item_id].original_stock = stock

    async def update_snapshot(self, db, shop_item_id, item_snapshot) -> None:
        self.rows[shop_item_id].item_snapshot = dict(item_snapshot)

    async def delete(self, db, shop_item_id) -> None:
        self.rows.pop(shop_item_id, None)

    async def delete_by_shop(self, db, shop_id) -> int:
        return self._drop(lambda i: i.shop_id == shop_id)

    async def delete_by_market(self, db, market_id) -> int:
        return self._drop(lambda i: i.market_id == market_id)

    async def delete_by_library_item(self, db, item_library_id) -> int:
        return self._drop(lambda i: i.item_library_id == item_library_id)

    async def restore_original_stock(self, db, market_id) -> int:
        n = 0
        for i in self.rows.values():
            if i.market_id == market_id:
                i.stock = i.original_stock
                n += 1
        return n


class FakeLibraryRepo:
    def __init__(self, markets: FakeMarketRepo | None = None,
                 shop_items: FakeShopItemRepo | None = None) -> None:
        self.rows: dict[str, LibraryItem] = {}
        self._markets = markets
        self._shop_items = shop_items

    async def count_by_dm(self, db, dm_id) -> int:
        return sum(1 for i in self.rows.values() if i.dm_id == dm_id)

    async def create(self, db, dm_id, item, source, official_id) -> LibraryItem:
        li = LibraryItem(
            id=_new_id("lib"), dm_id=dm_id, item=dict(item), source=source,
            official_id=official_id,
        )
        self.rows[li.id] = li
        return replace(li)

    async def get_by_id(self, db, item_id) -> LibraryItem | None:
        li = self.rows.get(item_id)
        return replace(li) if li else None

    async def list_by_dm(self, db, dm_id, item_type, source, search) -> list[LibraryItem]:
        out = []
        for li in self.rows.values():
            if li.dm_id != dm_id:
                continue
            if item_type and li.item_type != item_type:
                continue
            if source and li.source != source:
                continue
            if search and search.lower() not in li.name.lower():
                continue
            out.append(replace(li))
        return out

    async def update(self, db, item_id, item, source, official_id) -> LibraryItem | None:
        li = self.rows.get(item_id)
        if li is None:
            return None
        if item is not None:
            li.item = dict(item)
        if source is not None:
            li.source = source
        if official_id is not None:
            li.official_id = official_id
        return replace(li)

    async def delete(self, db, item_id) -> None:
        self.rows.pop(item_id, None)

    async def get_usage(self, db, item_id) -> ItemUsage:
        bindings = [
            i for i in (self._shop_items.rows.values() if self._shop_items else [])
            if i.item_library_id == item_id
        ]
        market_ids = sorted({i.market_id for i in bindings})
        active = any(
            self._markets.rows[m].is_active for m in market_ids
            if self._markets and m in self._markets.rows
        )
        return ItemUsage(item_id=item_id, shop_count=len(bindings),
                         in_active_market=active, market_ids=market_ids)


class FakeStockRepo:
    def __init__(self) -> None:
        self.hashes: dict[str, SessionStock] = {}

    async def replace_all(self, market_id, entries, ttl_seconds) -> None:
        self.hashes[market_id] = dict(entries)

    async def get_all(self, market_id) -> SessionStock:
        return dict(self.hashes.get(market_id, {}))

    async def get_entry(self, market_id, shop_item_id) -> tuple[bool, int | None]:
        h = self.hashes.get(market_id, {})
        if shop_item_id not in h:
            return False, None
        return True, h[shop_item_id]

    async def set_entry(self, market_id, shop_item_id, value) -> None:
        self.hashes.setdefault(market_id, {})[shop_item_id] = value

    async def clear(self, market_id) -> None:
        self.hashes.pop(market_id, None)


class FakePlayerSessionRepo:
    def __init__(self) -> None:
        self.rows: dict[str, PlayerSession] = {}

    async def create(self, db, market_id, player_name, now) -> PlayerSession:
        s = PlayerSession(
            id=_new_id("ps"), market_id=market_id, player_name=player_name,
            entered_at=now, last_active_at=now,
        )
        self.rows[s.id] = s
        return replace(s, transactions=list(s.transactions))

    async def get_by_id(self, db, session_id) -> PlayerSession | None:
        s = self.rows.get(session_id)
        return replace(s, transactions=list(s.transactions)) if s else None

    async def append_transaction(self, db, session_id, transaction: Transaction) -> bool:
        s = self.rows.get(session_id)
        if s is None:
            return False
        s.transactions.append(transaction)
        s.last_active_at = transaction.timestamp
        return True

    async def list_by_market(self, db, market_id) -> list[PlayerSession]:
        sessions = [s for s in self.rows.values() if s.market_id == market_id]
        return sorted(sessions, key=lambda s: s.last_active_at, reverse=True)

    async def delete_by_market(self, db, market_id) -> int:
        doomed = [k for k, s in self.rows.items() if s.market_id == market_id]
        for k in doomed:
            del self.rows[k]
        return len(doomed)
