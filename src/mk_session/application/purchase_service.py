"""PurchaseService — server-side validation of a player's purchase.

The player's purse lives on their device and is submitted with each
request; the server checks it covers the price, takes the stock and hands
back the new purse. A rejected purchase changes nothing.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.mk_common.currency import subtract
from src.mk_common.enums import TransactionType
from src.mk_common.errors import (
    CannotAffordError,
    MarketNotActiveError,
    OutOfStockError,
    ShopItemNotFoundError,
)
from src.mk_market.application.service import MarketLifecycleService
from src.mk_session.application.activity_service import PlayerActivityService
from src.mk_session.application.schemas import PurchaseRequest
from src.mk_session.application.stock_service import SessionStockService
from src.mk_session.domain.models import PurchaseResult
from src.mk_shop.domain.repository import ShopItemRepositoryProtocol
from src.mk_shop.infrastructure.persistence import ShopItemRepository

logger = logging.getLogger(__name__)


class PurchaseService:
    def __init__(
        self,
        market_service: MarketLifecycleService | None = None,
        item_repo: ShopItemRepositoryProtocol | None = None,
        stock_service: SessionStockService | None = None,
        activity_service: PlayerActivityService | None = None,
    ) -> None:
        self._markets = market_service or MarketLifecycleService()
        self._items: ShopItemRepositoryProtocol = item_repo or ShopItemRepository()
        self._stock = stock_service or SessionStockService()
        self._activity = activity_service or PlayerActivityService()

    async def purchase(
        self, db: AsyncSession, access_code: str, body: PurchaseRequest
    ) -> PurchaseResult:
        market = await self._markets.get_market_by_access_code(db, access_code)
        if not market.is_active:
            raise MarketNotActiveError(access_code)

        item = await self._items.get_by_id(db, body.shop_item_id)
        if item is None or item.market_id != market.id:
            raise ShopItemNotFoundError(body.shop_item_id)

        wallet = body.currency.to_domain()
        line_total = item.price.times(body.quantity)
        new_currency = subtract(wallet, line_total)
        if new_currency is None:
            raise CannotAffordError(line_total.to_copper(), wallet.to_copper())

        # Items bound after activation have no counter yet
        await self._stock.seed_item(market.id, item)
        if not await self._stock.decrease_stock(market.id, item.id, body.quantity):
            raise OutOfStockError(item.name)
        remaining = await self._stock.current_stock(market.id, item)

        if body.session_id:
            await self._log_purchase(db, body.session_id, item.name, body.quantity)

        logger.info(
            "Purchase in market %s: %s x%d for %d cp",
            market.id, item.name, body.quantity, line_total.to_copper(),
        )
        return PurchaseResult(
            shop_item_id=item.id,
            item_name=item.name,
            quantity=body.quantity,
            line_total=line_total,
            new_currency=new_currency,
            remaining_stock=remaining,
        )

    async def _log_purchase(
        self, db: AsyncSession, session_id: str, item_name: str, quantity: int
    ) -> None:
        # The activity feed is advisory; a failed write never undoes a sale.
        try:
            await self._activity.add_transaction(
                db, session_id, TransactionType.BUY, item_name, quantity
            )
        except Exception as exc:
            logger.warning("Could not log purchase for session %s: %s", session_id, exc)
