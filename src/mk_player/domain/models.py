"""Player cart record, stored on the player's device.

Field names serialise in camelCase so a record written by the browser
client and one written here are interchangeable.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.mk_common.currency import Currency


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Purse(_CamelModel):
    gold: int = 0
    silver: int = 0
    copper: int = 0

    def to_currency(self) -> Currency:
        return Currency(gp=self.gold, sp=self.silver, cp=self.copper)


class Coins(_CamelModel):
    """Per-denomination amount, as used for line totals and sale prices."""

    gp: int = 0
    sp: int = 0
    cp: int = 0

    @classmethod
    def of(cls, c: Currency) -> "Coins":
        return cls(gp=c.gp, sp=c.sp, cp=c.cp)

    def to_currency(self) -> Currency:
        return Currency(gp=self.gp, sp=self.sp, cp=self.cp)


class InventoryLine(_CamelModel):
    name: str
    type: str = ""
    quantity: int = 1
    details: dict[str, Any] = Field(default_factory=dict)
    total_spent: Coins = Field(default_factory=Coins)


class SoldItem(_CamelModel):
    name: str
    price: Coins


class CartData(_CamelModel):
    name: str
    gold: int = 0
    silver: int = 0
    copper: int = 0
    starting_currency: Purse = Field(default_factory=Purse)
    inventory: list[InventoryLine] = Field(default_factory=list)
    sold_items: list[SoldItem] = Field(default_factory=list)
    market_id: str | None = None
    access_code: str
    entered_at: int                     # epoch milliseconds
    session_id: str | None = None

    @property
    def currency(self) -> Currency:
        return Currency(gp=self.gold, sp=self.silver, cp=self.copper)

    def set_currency(self, c: Currency) -> None:
        self.gold, self.silver, self.copper = c.gp, c.sp, c.cp
