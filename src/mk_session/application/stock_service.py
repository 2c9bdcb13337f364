"""SessionStockService — stock counters that live only while a market is active.

Persisted shop item stock is the baseline; session entries track what
players have bought since activation. Deactivation clears the entries and
the caller restores stock from original_stock.
"""

import logging

from src.mk_market.domain.lifecycle import ACTIVATION_WINDOW
from src.mk_session.domain.models import SessionStock
from src.mk_session.domain.repository import SessionStockRepositoryProtocol
from src.mk_session.infrastructure.stock_store import RedisSessionStockRepository
from src.mk_shop.domain.models import ShopItem

logger = logging.getLogger(__name__)

# Hash TTL outlives the activation window by an hour; garbage collection only.
SESSION_TTL_SECONDS = int(ACTIVATION_WINDOW.total_seconds()) + 3600


class SessionStockService:
    def __init__(self, repo: SessionStockRepositoryProtocol | None = None) -> None:
        self._repo: SessionStockRepositoryProtocol = repo or RedisSessionStockRepository()

    async def initialize_market_session(
        self, market_id: str, shop_items: list[ShopItem]
    ) -> None:
        entries = {item.id: item.stock for item in shop_items}
        await self._repo.replace_all(market_id, entries, SESSION_TTL_SECONDS)
        logger.info("Session stock initialised for market %s (%d items)", market_id, len(entries))

    async def get_market_session_stock(self, market_id: str) -> SessionStock:
        return await self._repo.get_all(market_id)

    @staticmethod
    def effective_stock(shop_item: ShopItem, session: SessionStock) -> int | None:
        if shop_item.id in session:
            return session[shop_item.id]
        return shop_item.stock

    async def seed_item(self, market_id: str, shop_item: ShopItem) -> None:
        """Add an entry for an item bound after activation, unless one exists."""
        exists, _ = await self._repo.get_entry(market_id, shop_item.id)
        if not exists:
            await self._repo.set_entry(market_id, shop_item.id, shop_item.stock)

    async def current_stock(self, market_id: str, shop_item: ShopItem) -> int | None:
        exists, value = await self._repo.get_entry(market_id, shop_item.id)
        return value if exists else shop_item.stock

    async def decrease_stock(
        self, market_id: str, shop_item_id: str, amount: int = 1
    ) -> bool:
        """Take amount units. False when finite stock cannot cover it.

        Missing entries and unlimited entries always succeed. Read and write
        are two round trips, so concurrent buyers can both pass the check.
        """
        exists, current = await self._repo.get_entry(market_id, shop_item_id)
        if not exists or current is None:
            return True
        if current < amount:
            return False
        await self._repo.set_entry(market_id, shop_item_id, current - amount)
        return True

    async def clear_market_session(self, market_id: str) -> None:
        await self._repo.clear(market_id)
        logger.info("Session stock cleared for market %s", market_id)
