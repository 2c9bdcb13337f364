"""Pydantic schemas for the player-facing endpoints."""

from typing import Any

from pydantic import BaseModel, Field

from src.mk_common.currency import Currency
from src.mk_common.datetime_utils import iso_or_none
from src.mk_common.enums import TransactionType
from src.mk_session.domain.activity import format_transactions
from src.mk_session.domain.models import PlayerSession, PurchaseResult, Transaction
from src.mk_shop.domain.models import ShopItem

# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class PurseIn(BaseModel):
    gold: int = Field(0, ge=0)
    silver: int = Field(0, ge=0)
    copper: int = Field(0, ge=0)

    def to_domain(self) -> Currency:
        return Currency(gp=self.gold, sp=self.silver, cp=self.copper)


class PurchaseRequest(BaseModel):
    shop_item_id: str
    quantity: int = Field(1, ge=1)
    currency: PurseIn
    session_id: str | None = None      # activity log entry, optional


class CreateSessionRequest(BaseModel):
    player_name: str = Field(..., min_length=1, max_length=50)


class TransactionRequest(BaseModel):
    type: TransactionType
    item_name: str = Field("", max_length=200)
    quantity: int = Field(1, ge=1)


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


def purse_out(c: Currency) -> dict[str, int]:
    return {"gold": c.gp, "silver": c.sp, "copper": c.cp}


class PurchaseOut(BaseModel):
    shop_item_id: str
    item_name: str
    quantity: int
    line_total: dict[str, int]
    new_currency: dict[str, int]
    remaining_stock: int | None

    @classmethod
    def from_domain(cls, r: PurchaseResult) -> "PurchaseOut":
        return cls(
            shop_item_id=r.shop_item_id,
            item_name=r.item_name,
            quantity=r.quantity,
            line_total=r.line_total.to_dict(),
            new_currency=purse_out(r.new_currency),
            remaining_stock=r.remaining_stock,
        )


class TransactionOut(BaseModel):
    type: str
    item_name: str
    quantity: int
    timestamp: str | None

    @classmethod
    def from_domain(cls, t: Transaction) -> "TransactionOut":
        return cls(
            type=t.type,
            item_name=t.item_name,
            quantity=t.quantity,
            timestamp=iso_or_none(t.timestamp),
        )


class PlayerSessionOut(BaseModel):
    id: str
    market_id: str
    player_name: str
    entered_at: str | None
    last_active_at: str | None
    transactions: list[TransactionOut]
    activity: str

    @classmethod
    def from_domain(cls, s: PlayerSession) -> "PlayerSessionOut":
        return cls(
            id=s.id,
            market_id=s.market_id,
            player_name=s.player_name,
            entered_at=iso_or_none(s.entered_at),
            last_active_at=iso_or_none(s.last_active_at),
            transactions=[TransactionOut.from_domain(t) for t in s.transactions],
            activity=format_transactions(s.transactions),
        )


class PlayerShopItemOut(BaseModel):
    """A shop item as players see it: snapshot data, price, live stock."""

    id: str
    shop_id: str
    name: str
    price: dict[str, int]
    stock: int | None
    in_stock: bool
    item: dict[str, Any]

    @classmethod
    def from_domain(cls, si: ShopItem, stock: int | None) -> "PlayerShopItemOut":
        return cls(
            id=si.id,
            shop_id=si.shop_id,
            name=si.name,
            price=si.price.to_dict(),
            stock=stock,
            in_stock=stock is None or stock > 0,
            item=si.item_snapshot,
        )
