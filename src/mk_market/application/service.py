"""MarketLifecycleService — market CRUD and the activation window.

A DM has at most one active market. Activation opens a three-hour window
and seeds session stock; deactivation (explicit, or on the first read after
the window closes) clears session stock, restores every shop item to its
original_stock and drops the player activity log.

Known gaps, kept deliberately:
  * the single-active check and the activating write are separate round
    trips with no lock or unique index, so two concurrent activations can
    both succeed;
  * deactivation touches Redis before PostgreSQL with no shared transaction.
"""

import logging
from collections.abc import Callable
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from src.mk_common.datetime_utils import utc_now
from src.mk_common.errors import (
    ActiveMarketConflictError,
    ForbiddenError,
    LimitExceededError,
    MarketNotFoundError,
)
from src.mk_common.limits import MARKETS_PER_DM
from src.mk_market.application.schemas import (
    CreateMarketRequest,
    UpdateMarketRequest,
    WindowStatusOut,
    shareable_url,
)
from src.mk_market.domain.lifecycle import activation_deadline, generate_access_code, is_expired
from src.mk_market.domain.models import Market
from src.mk_market.domain.repository import MarketRepositoryProtocol
from src.mk_market.infrastructure.persistence import MarketRepository
from src.mk_session.application.activity_service import PlayerActivityService
from src.mk_session.application.stock_service import SessionStockService
from src.mk_session.domain.models import PlayerSession
from src.mk_shop.domain.repository import ShopItemRepositoryProtocol, ShopRepositoryProtocol
from src.mk_shop.infrastructure.persistence import ShopItemRepository, ShopRepository

logger = logging.getLogger(__name__)


class MarketLifecycleService:
    def __init__(
        self,
        repo: MarketRepositoryProtocol | None = None,
        shop_repo: ShopRepositoryProtocol | None = None,
        item_repo: ShopItemRepositoryProtocol | None = None,
        stock_service: SessionStockService | None = None,
        activity_service: PlayerActivityService | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._repo: MarketRepositoryProtocol = repo or MarketRepository()
        self._shops: ShopRepositoryProtocol = shop_repo or ShopRepository()
        self._items: ShopItemRepositoryProtocol = item_repo or ShopItemRepository()
        self._stock = stock_service or SessionStockService()
        self._activity = activity_service or PlayerActivityService()
        self._clock = clock

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def reconcile_expiry(self, db: AsyncSession, market: Market) -> Market:
        """Deactivate market if its window has closed; otherwise return it as is.

        Idempotent. Every read that needs the current state goes through here.
        """
        if not is_expired(market, self._clock()):
            return market
        logger.info("Market %s window closed at %s, deactivating", market.id, market.active_until)
        return await self._deactivate(db, market)

    async def get_owned(self, db: AsyncSession, dm_id: str, market_id: str) -> Market:
        market = await self._repo.get_by_id(db, market_id)
        if market is None:
            raise MarketNotFoundError(market_id)
        if market.dm_id != dm_id:
            raise ForbiddenError("market")
        return await self.reconcile_expiry(db, market)

    async def get_market(self, db: AsyncSession, dm_id: str, market_id: str) -> Market:
        return await self.get_owned(db, dm_id, market_id)

    async def list_markets(self, db: AsyncSession, dm_id: str) -> list[Market]:
        markets = await self._repo.list_by_dm(db, dm_id)
        return [await self.reconcile_expiry(db, m) for m in markets]

    async def get_active_market(self, db: AsyncSession, dm_id: str) -> Market | None:
        market = await self._repo.get_active_by_dm(db, dm_id)
        if market is None:
            return None
        market = await self.reconcile_expiry(db, market)
        return market if market.is_active else None

    async def get_market_by_access_code(self, db: AsyncSession, access_code: str) -> Market:
        market = await self._repo.get_by_access_code(db, access_code)
        if market is None:
            raise MarketNotFoundError(access_code)
        return await self.reconcile_expiry(db, market)

    @staticmethod
    def get_shareable_url(access_code: str) -> str:
        return shareable_url(access_code)

    def window_status(self, market: Market) -> WindowStatusOut:
        return WindowStatusOut.from_domain(market, self._clock())

    async def list_players(
        self, db: AsyncSession, dm_id: str, market_id: str
    ) -> list[PlayerSession]:
        market = await self.get_owned(db, dm_id, market_id)
        return await self._activity.list_market_sessions(db, market.id)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create_market(
        self, db: AsyncSession, dm_id: str, body: CreateMarketRequest
    ) -> Market:
        count = await self._repo.count_by_dm(db, dm_id)
        if count >= MARKETS_PER_DM:
            raise LimitExceededError(
                f"you already have the maximum of {MARKETS_PER_DM} markets"
            )
        # Codes are not checked against existing ones; collisions are unlikely
        # with a 36^6 suffix and are not handled.
        access_code = generate_access_code(body.name)
        try:
            market = await self._repo.create(db, dm_id, body.name, body.description, access_code)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Market %s created by DM %s (code %s)", market.id, dm_id, access_code)
        return market

    async def update_market(
        self, db: AsyncSession, dm_id: str, market_id: str, body: UpdateMarketRequest
    ) -> Market:
        await self.get_owned(db, dm_id, market_id)
        try:
            updated = await self._repo.update_details(db, market_id, body.name, body.description)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        if updated is None:
            raise MarketNotFoundError(market_id)
        return updated

    async def activate_market(self, db: AsyncSession, dm_id: str, market_id: str) -> Market:
        market = await self.get_owned(db, dm_id, market_id)
        active = await self.get_active_market(db, dm_id)
        if active is not None:
            if active.id != market.id:
                raise ActiveMarketConflictError(active.name)
            # Already open: activating again does not extend the window.
            return active

        until = activation_deadline(self._clock())
        try:
            activated = await self._repo.set_active(db, market_id, until)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        if activated is None:
            raise MarketNotFoundError(market_id)

        shop_items = await self._items.list_by_market(db, market_id)
        await self._stock.initialize_market_session(market_id, shop_items)
        logger.info("Market %s activated until %s", market_id, until.isoformat())
        return activated

    async def deactivate_market(self, db: AsyncSession, dm_id: str, market_id: str) -> Market:
        market = await self.get_owned(db, dm_id, market_id)
        if not market.is_active:
            return market
        return await self._deactivate(db, market)

    async def _deactivate(self, db: AsyncSession, market: Market) -> Market:
        await self._stock.clear_market_session(market.id)
        try:
            restored = await self._items.restore_original_stock(db, market.id)
            updated = await self._repo.set_inactive(db, market.id)
            dropped = await self._activity.delete_market_sessions(db, market.id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info(
            "Market %s deactivated (%d items restored, %d player sessions dropped)",
            market.id, restored, dropped,
        )
        if updated is None:
            raise MarketNotFoundError(market.id)
        return updated

    async def delete_market(self, db: AsyncSession, dm_id: str, market_id: str) -> None:
        """Delete the market, its shops and their items. Library items stay."""
        market = await self.get_owned(db, dm_id, market_id)
        if market.is_active:
            await self._stock.clear_market_session(market.id)
        try:
            items = await self._items.delete_by_market(db, market_id)
            shops = await self._shops.delete_by_market(db, market_id)
            await self._activity.delete_market_sessions(db, market_id)
            await self._repo.delete(db, market_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Market %s deleted (%d shops, %d items)", market_id, shops, items)
