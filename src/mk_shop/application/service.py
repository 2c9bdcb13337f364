"""ShopApplicationService — storefronts inside a market and their item bindings.

Every operation resolves the owning market first and checks it belongs to
the calling DM. Shop items copy the library document at bind time so the
player-facing views never read the DM's library.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.mk_common.datetime_utils import utc_now
from src.mk_common.errors import (
    ForbiddenError,
    LibraryItemNotFoundError,
    LimitExceededError,
    MarketNotFoundError,
    ShopItemNotFoundError,
    ShopNotFoundError,
)
from src.mk_common.limits import ITEMS_PER_SHOP, SHOPS_PER_MARKET
from src.mk_library.domain.models import LibraryItem
from src.mk_library.domain.repository import LibraryRepositoryProtocol
from src.mk_library.infrastructure.persistence import LibraryRepository
from src.mk_market.domain.lifecycle import is_expired
from src.mk_market.domain.models import Market
from src.mk_market.domain.repository import MarketRepositoryProtocol
from src.mk_market.infrastructure.persistence import MarketRepository
from src.mk_session.application.stock_service import SessionStockService
from src.mk_shop.application.schemas import (
    AddShopItemRequest,
    CreateShopRequest,
    ReorderRequest,
    ShopItemOut,
    ShopOut,
    UpdateShopItemRequest,
    UpdateShopRequest,
)
from src.mk_shop.domain.models import Shop, ShopItem
from src.mk_shop.domain.pricing import validate_price
from src.mk_shop.domain.repository import (
    ShopItemRepositoryProtocol,
    ShopRepositoryProtocol,
)
from src.mk_shop.infrastructure.persistence import ShopItemRepository, ShopRepository

logger = logging.getLogger(__name__)


class ShopApplicationService:
    def __init__(
        self,
        shop_repo: ShopRepositoryProtocol | None = None,
        item_repo: ShopItemRepositoryProtocol | None = None,
        market_repo: MarketRepositoryProtocol | None = None,
        library_repo: LibraryRepositoryProtocol | None = None,
        stock_service: SessionStockService | None = None,
    ) -> None:
        self._shops: ShopRepositoryProtocol = shop_repo or ShopRepository()
        self._items: ShopItemRepositoryProtocol = item_repo or ShopItemRepository()
        self._markets: MarketRepositoryProtocol = market_repo or MarketRepository()
        self._library: LibraryRepositoryProtocol = library_repo or LibraryRepository()
        self._stock = stock_service or SessionStockService()

    # ------------------------------------------------------------------
    # Ownership
    # ------------------------------------------------------------------

    async def _owned_market(self, db: AsyncSession, dm_id: str, market_id: str) -> Market:
        market = await self._markets.get_by_id(db, market_id)
        if market is None:
            raise MarketNotFoundError(market_id)
        if market.dm_id != dm_id:
            raise ForbiddenError("market")
        return market

    async def _owned_shop(
        self, db: AsyncSession, dm_id: str, shop_id: str
    ) -> tuple[Shop, Market]:
        shop = await self._shops.get_by_id(db, shop_id)
        if shop is None:
            raise ShopNotFoundError(shop_id)
        market = await self._owned_market(db, dm_id, shop.market_id)
        return shop, market

    async def _owned_item(
        self, db: AsyncSession, dm_id: str, shop_item_id: str
    ) -> tuple[ShopItem, Market]:
        item = await self._items.get_by_id(db, shop_item_id)
        if item is None:
            raise ShopItemNotFoundError(shop_item_id)
        market = await self._owned_market(db, dm_id, item.market_id)
        return item, market

    async def _owned_library_item(
        self, db: AsyncSession, dm_id: str, item_id: str
    ) -> LibraryItem:
        lib = await self._library.get_by_id(db, item_id)
        if lib is None:
            raise LibraryItemNotFoundError(item_id)
        if lib.dm_id != dm_id:
            raise ForbiddenError("library item")
        return lib

    # ------------------------------------------------------------------
    # Shops
    # ------------------------------------------------------------------

    async def create_shop(
        self, db: AsyncSession, dm_id: str, market_id: str, body: CreateShopRequest
    ) -> ShopOut:
        await self._owned_market(db, dm_id, market_id)
        count = await self._shops.count_by_market(db, market_id)
        if count >= SHOPS_PER_MARKET:
            raise LimitExceededError(
                f"this market already has the maximum of {SHOPS_PER_MARKET} shops"
            )
        fields = body.model_dump()
        fields["category"] = body.category.value
        try:
            # New shops go to the end of the list
            shop = await self._shops.create(db, market_id, fields, display_order=count)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return ShopOut.from_domain(shop)

    async def get_shop(self, db: AsyncSession, dm_id: str, shop_id: str) -> ShopOut:
        shop, _ = await self._owned_shop(db, dm_id, shop_id)
        return ShopOut.from_domain(shop)

    async def list_shops(self, db: AsyncSession, dm_id: str, market_id: str) -> list[ShopOut]:
        await self._owned_market(db, dm_id, market_id)
        shops = await self._shops.list_by_market(db, market_id)
        return [ShopOut.from_domain(s) for s in shops]

    async def update_shop(
        self, db: AsyncSession, dm_id: str, shop_id: str, body: UpdateShopRequest
    ) -> ShopOut:
        await self._owned_shop(db, dm_id, shop_id)
        fields = body.model_dump(exclude_unset=True)
        if body.category is not None:
            fields["category"] = body.category.value
        try:
            updated = await self._shops.update(db, shop_id, fields)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        if updated is None:
            raise ShopNotFoundError(shop_id)
        return ShopOut.from_domain(updated)

    async def reorder_shops(
        self, db: AsyncSession, dm_id: str, market_id: str, body: ReorderRequest
    ) -> list[ShopOut]:
        await self._owned_market(db, dm_id, market_id)
        shops = {s.id: s for s in await self._shops.list_by_market(db, market_id)}
        for shop_id in body.shop_ids:
            if shop_id not in shops:
                raise ShopNotFoundError(shop_id)
        try:
            for position, shop_id in enumerate(body.shop_ids):
                await self._shops.set_order(db, shop_id, position)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return [ShopOut.from_domain(s) for s in await self._shops.list_by_market(db, market_id)]

    async def delete_shop(self, db: AsyncSession, dm_id: str, shop_id: str) -> None:
        """Delete the shop and its item bindings. Library items are untouched."""
        await self._owned_shop(db, dm_id, shop_id)
        try:
            removed = await self._items.delete_by_shop(db, shop_id)
            await self._shops.delete(db, shop_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Shop %s deleted (%d items removed)", shop_id, removed)

    # ------------------------------------------------------------------
    # Shop items
    # ------------------------------------------------------------------

    async def add_item(
        self, db: AsyncSession, dm_id: str, shop_id: str, body: AddShopItemRequest
    ) -> ShopItemOut:
        shop, market = await self._owned_shop(db, dm_id, shop_id)
        count = await self._items.count_by_shop(db, shop_id)
        if count >= ITEMS_PER_SHOP:
            raise LimitExceededError(
                f"this shop already has the maximum of {ITEMS_PER_SHOP} items"
            )
        lib = await self._owned_library_item(db, dm_id, body.item_library_id)

        if body.price is not None:
            price = body.price.to_domain()
        else:
            price = lib.default_price
        price = validate_price(price)

        try:
            item = await self._items.create(
                db,
                shop_id=shop.id,
                market_id=market.id,
                item_library_id=lib.id,
                price=price,
                stock=body.stock,
                item_snapshot=lib.item,
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        # Items bound during a live session get their own counter
        if market.is_active and not is_expired(market, utc_now()):
            await self._stock.seed_item(market.id, item)
        return ShopItemOut.from_domain(item)

    async def list_items(self, db: AsyncSession, dm_id: str, shop_id: str) -> list[ShopItemOut]:
        await self._owned_shop(db, dm_id, shop_id)
        items = await self._items.list_by_shop(db, shop_id)
        return [ShopItemOut.from_domain(i) for i in items]

    async def get_item(self, db: AsyncSession, dm_id: str, shop_item_id: str) -> ShopItemOut:
        item, _ = await self._owned_item(db, dm_id, shop_item_id)
        return ShopItemOut.from_domain(item)

    async def update_item(
        self,
        db: AsyncSession,
        dm_id: str,
        shop_item_id: str,
        body: UpdateShopItemRequest,
    ) -> ShopItemOut:
        item, _ = await self._owned_item(db, dm_id, shop_item_id)
        price = validate_price(body.price.to_domain()) if body.price is not None else None
        snapshot = None
        if body.refresh_snapshot:
            lib = await self._owned_library_item(db, dm_id, item.item_library_id)
            snapshot = lib.item

        try:
            if price is not None:
                await self._items.update_price(db, shop_item_id, price)
            if body.stock_sent:
                await self._items.update_stock(db, shop_item_id, body.stock)
            if snapshot is not None:
                await self._items.update_snapshot(db, shop_item_id, snapshot)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        updated = await self._items.get_by_id(db, shop_item_id)
        if updated is None:
            raise ShopItemNotFoundError(shop_item_id)
        return ShopItemOut.from_domain(updated)

    async def remove_item(self, db: AsyncSession, dm_id: str, shop_item_id: str) -> None:
        await self._owned_item(db, dm_id, shop_item_id)
        try:
            await self._items.delete(db, shop_item_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
