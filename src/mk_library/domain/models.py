"""Domain models for mk_library — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from src.mk_common.currency import Currency


@dataclass
class LibraryItem:
    id: str
    dm_id: str
    item: dict[str, Any]      # validated document, see item_schema.item_to_document
    source: str               # ItemSource value
    official_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def name(self) -> str:
        return str(self.item.get("name", ""))

    @property
    def item_type(self) -> str:
        return str(self.item.get("type", ""))

    @property
    def default_price(self) -> Currency | None:
        """Library cost as a three-denomination price, or None if unpriced."""
        cost = self.item.get("cost")
        if not cost:
            return None
        return Currency.from_single(int(cost["amount"]), cost["currency"])


@dataclass
class ItemUsage:
    item_id: str
    shop_count: int
    in_active_market: bool
    market_ids: list[str] = field(default_factory=list)
