"""PlayerMarketService — the read side a player sees through an access code.

No authentication: knowing the code is enough. Shops and items are only
served while the market is active; the market view and window status are
always available so the client can show a closed screen.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from src.mk_common.errors import MarketNotActiveError, PlayerSessionNotFoundError, ShopNotFoundError
from src.mk_market.application.schemas import PublicMarketOut, WindowStatusOut
from src.mk_market.application.service import MarketLifecycleService
from src.mk_market.domain.models import Market
from src.mk_session.application.activity_service import PlayerActivityService
from src.mk_session.application.schemas import (
    CreateSessionRequest,
    PlayerSessionOut,
    PlayerShopItemOut,
    TransactionOut,
    TransactionRequest,
)
from src.mk_session.application.stock_service import SessionStockService
from src.mk_shop.application.schemas import ShopOut
from src.mk_shop.domain.repository import ShopItemRepositoryProtocol, ShopRepositoryProtocol
from src.mk_shop.infrastructure.persistence import ShopItemRepository, ShopRepository


class PlayerMarketService:
    def __init__(
        self,
        market_service: MarketLifecycleService | None = None,
        shop_repo: ShopRepositoryProtocol | None = None,
        item_repo: ShopItemRepositoryProtocol | None = None,
        stock_service: SessionStockService | None = None,
        activity_service: PlayerActivityService | None = None,
    ) -> None:
        self._markets = market_service or MarketLifecycleService()
        self._shops: ShopRepositoryProtocol = shop_repo or ShopRepository()
        self._items: ShopItemRepositoryProtocol = item_repo or ShopItemRepository()
        self._stock = stock_service or SessionStockService()
        self._activity = activity_service or PlayerActivityService()

    async def _active_market(self, db: AsyncSession, access_code: str) -> Market:
        market = await self._markets.get_market_by_access_code(db, access_code)
        if not market.is_active:
            raise MarketNotActiveError(access_code)
        return market

    async def get_market(self, db: AsyncSession, access_code: str) -> PublicMarketOut:
        market = await self._markets.get_market_by_access_code(db, access_code)
        window = self._markets.window_status(market)
        return PublicMarketOut(
            id=market.id,
            name=market.name,
            description=market.description,
            access_code=market.access_code,
            window=window,
        )

    async def get_status(self, db: AsyncSession, access_code: str) -> WindowStatusOut:
        market = await self._markets.get_market_by_access_code(db, access_code)
        return self._markets.window_status(market)

    async def list_shops(self, db: AsyncSession, access_code: str) -> list[ShopOut]:
        market = await self._active_market(db, access_code)
        shops = await self._shops.list_by_market(db, market.id)
        return [ShopOut.from_domain(s) for s in shops]

    async def get_shop_inventory(
        self, db: AsyncSession, access_code: str, shop_id: str
    ) -> tuple[ShopOut, list[PlayerShopItemOut]]:
        market = await self._active_market(db, access_code)
        shop = await self._shops.get_by_id(db, shop_id)
        if shop is None or shop.market_id != market.id:
            raise ShopNotFoundError(shop_id)
        items = await self._items.list_by_shop(db, shop_id)
        session = await self._stock.get_market_session_stock(market.id)
        out = [
            PlayerShopItemOut.from_domain(i, SessionStockService.effective_stock(i, session))
            for i in items
        ]
        return ShopOut.from_domain(shop), out

    async def create_session(
        self, db: AsyncSession, access_code: str, body: CreateSessionRequest
    ) -> PlayerSessionOut:
        market = await self._active_market(db, access_code)
        session = await self._activity.create_session(db, market.id, body.player_name)
        return PlayerSessionOut.from_domain(session)

    async def add_transaction(
        self,
        db: AsyncSession,
        access_code: str,
        session_id: str,
        body: TransactionRequest,
    ) -> TransactionOut:
        market = await self._markets.get_market_by_access_code(db, access_code)
        session = await self._activity.get_session(db, session_id)
        if session.market_id != market.id:
            raise PlayerSessionNotFoundError(session_id)
        t = await self._activity.add_transaction(
            db, session_id, body.type, body.item_name, body.quantity
        )
        return TransactionOut.from_domain(t)
