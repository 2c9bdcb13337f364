"""Domain models for mk_shop — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from src.mk_common.currency import Currency


@dataclass
class Shop:
    id: str
    market_id: str
    name: str
    category: str              # ShopCategory value
    location: str
    description: str
    shopkeeper: str | None = None
    tags: list[str] = field(default_factory=list)
    display_order: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class ShopItem:
    """A library item bound into a shop with its own price and stock.

    stock=None means unlimited. original_stock is the baseline restored when
    the market's activation window ends. item_snapshot is a copy of the
    library document taken when the binding was made (or refreshed), so
    players never read the DM's library.
    """

    id: str
    shop_id: str
    market_id: str
    item_library_id: str
    price: Currency
    stock: int | None
    original_stock: int | None
    item_snapshot: dict[str, Any]
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def name(self) -> str:
        return str(self.item_snapshot.get("name", ""))

    @property
    def is_unlimited(self) -> bool:
        return self.stock is None
