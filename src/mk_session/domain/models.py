"""Domain models for mk_session — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass, field
from datetime import datetime

from src.mk_common.currency import Currency

# Session stock snapshot for one market: shop item id -> remaining count,
# None meaning unlimited.
SessionStock = dict[str, int | None]


@dataclass
class Transaction:
    type: str                  # TransactionType value
    item_name: str
    quantity: int
    timestamp: datetime


@dataclass
class PlayerSession:
    """One player's visit to a market, shown to the DM as an activity feed.

    Never carries currency; the player's purse lives on their device.
    """

    id: str
    market_id: str
    player_name: str
    entered_at: datetime
    last_active_at: datetime
    transactions: list[Transaction] = field(default_factory=list)


@dataclass
class PurchaseResult:
    shop_item_id: str
    item_name: str
    quantity: int
    line_total: Currency
    new_currency: Currency
    remaining_stock: int | None
