"""Repository Protocols for shops and shop items.

Unit tests inject a mock that conforms to these Protocols.
"""

from typing import Any, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.mk_common.currency import Currency
from src.mk_shop.domain.models import Shop, ShopItem


class ShopRepositoryProtocol(Protocol):
    async def count_by_market(self, db: AsyncSession, market_id: str) -> int: ...

    async def create(
        self, db: AsyncSession, market_id: str, fields: dict[str, Any], display_order: int
    ) -> Shop: ...

    async def get_by_id(self, db: AsyncSession, shop_id: str) -> Shop | None: ...

    async def list_by_market(self, db: AsyncSession, market_id: str) -> list[Shop]: ...

    async def update(
        self, db: AsyncSession, shop_id: str, fields: dict[str, Any]
    ) -> Shop | None: ...

    async def set_order(self, db: AsyncSession, shop_id: str, display_order: int) -> None: ...

    async def delete(self, db: AsyncSession, shop_id: str) -> None: ...

    async def delete_by_market(self, db: AsyncSession, market_id: str) -> int: ...


class ShopItemRepositoryProtocol(Protocol):
    async def count_by_shop(self, db: AsyncSession, shop_id: str) -> int: ...

    async def create(
        self,
        db: AsyncSession,
        shop_id: str,
        market_id: str,
        item_library_id: str,
        price: Currency,
        stock: int | None,
        item_snapshot: dict[str, Any],
    ) -> ShopItem: ...

    async def get_by_id(self, db: AsyncSession, shop_item_id: str) -> ShopItem | None: ...

    async def list_by_shop(self, db: AsyncSession, shop_id: str) -> list[ShopItem]: ...

    async def list_by_market(self, db: AsyncSession, market_id: str) -> list[ShopItem]: ...

    async def update_price(
        self, db: AsyncSession, shop_item_id: str, price: Currency
    ) -> None: ...

    async def update_stock(
        self, db: AsyncSession, shop_item_id: str, stock: int | None
    ) -> None: ...

    async def update_snapshot(
        self, db: AsyncSession, shop_item_id: str, item_snapshot: dict[str, Any]
    ) -> None: ...

    async def delete(self, db: AsyncSession, shop_item_id: str) -> None: ...

    async def delete_by_shop(self, db: AsyncSession, shop_id: str) -> int: ...

    async def delete_by_market(self, db: AsyncSession, market_id: str) -> int: ...

    async def delete_by_library_item(self, db: AsyncSession, item_library_id: str) -> int: ...

    async def restore_original_stock(self, db: AsyncSession, market_id: str) -> int: ...
