"""PlayerCart — the player's purse, inventory and sales for one market.

Lives entirely on the player's device. The server validates purchases
against the purse the client submits, but never stores the purse; this
class is the source of truth for it.

Keys in the store:
  player_{access_code}_name   display name, survives finish()
  player_{access_code}_data   CartData JSON
"""

import logging
import time
from typing import Any

from src.mk_common.currency import Currency, subtract
from src.mk_common.errors import (
    CannotAffordError,
    CartNotStartedError,
    InvalidPriceError,
    InvalidQuantityError,
    MissingItemNameError,
)
from src.mk_player.domain.models import CartData, Coins, InventoryLine, Purse, SoldItem
from src.mk_player.domain.store import LocalStore

logger = logging.getLogger(__name__)

DEFAULT_PLAYER_NAME = "Adventurer"


def name_key(access_code: str) -> str:
    return f"player_{access_code}_name"


def data_key(access_code: str) -> str:
    return f"player_{access_code}_data"


class PlayerCart:
    def __init__(self, store: LocalStore, access_code: str) -> None:
        self._store = store
        self.access_code = access_code

    # ------------------------------------------------------------------
    # Name
    # ------------------------------------------------------------------

    def set_name(self, name: str) -> None:
        self._store.set(name_key(self.access_code), name.strip())

    def get_name(self) -> str:
        return self._store.get(name_key(self.access_code)) or DEFAULT_PLAYER_NAME

    # ------------------------------------------------------------------
    # Record
    # ------------------------------------------------------------------

    def load(self) -> CartData | None:
        raw = self._store.get(data_key(self.access_code))
        if raw is None:
            return None
        return CartData.model_validate_json(raw)

    def _require(self) -> CartData:
        data = self.load()
        if data is None:
            raise CartNotStartedError(self.access_code)
        return data

    def _save(self, data: CartData) -> None:
        self._store.set(data_key(self.access_code), data.model_dump_json(by_alias=True))

    def start(
        self,
        gold: int,
        silver: int,
        copper: int,
        market_id: str | None = None,
        session_id: str | None = None,
    ) -> CartData:
        """Create the record with the purse the player says they walked in with."""
        data = CartData(
            name=self.get_name(),
            gold=gold,
            silver=silver,
            copper=copper,
            starting_currency=Purse(gold=gold, silver=silver, copper=copper),
            market_id=market_id,
            access_code=self.access_code,
            entered_at=int(time.time() * 1000),
            session_id=session_id,
        )
        self._save(data)
        return data

    def record_purchase(
        self, item: dict[str, Any], price: Currency, quantity: int = 1
    ) -> Currency:
        """Pay for quantity units and add them to the inventory.

        Payment goes through copper and is re-split, so 1 gp paying 5 sp
        leaves 5 sp. Lines are matched by item name; total_spent adds up
        per denomination.
        """
        if quantity < 1:
            raise InvalidQuantityError(quantity)
        if min(price.gp, price.sp, price.cp) < 0:
            raise InvalidPriceError()
        data = self._require()
        line_total = price.times(quantity)
        remaining = subtract(data.currency, line_total)
        if remaining is None:
            raise CannotAffordError(line_total.to_copper(), data.currency.to_copper())

        name = str(item.get("name", ""))
        line = next((i for i in data.inventory if i.name == name), None)
        if line is None:
            data.inventory.append(
                InventoryLine(
                    name=name,
                    type=str(item.get("type", "")),
                    quantity=quantity,
                    details=item,
                    total_spent=Coins.of(line_total),
                )
            )
        else:
            line.quantity += quantity
            line.total_spent = Coins.of(line.total_spent.to_currency().plus(line_total))

        data.set_currency(remaining)
        self._save(data)
        return remaining

    def record_sale(self, item_name: str, price: Currency) -> Currency:
        """Add a sale's proceeds per denomination. No stock goes back anywhere."""
        name = item_name.strip()
        if not name:
            raise MissingItemNameError()
        if not price.has_positive_denomination() or min(price.gp, price.sp, price.cp) < 0:
            raise InvalidPriceError()
        data = self._require()
        data.set_currency(data.currency.plus(price))
        data.sold_items.append(SoldItem(name=name, price=Coins.of(price)))
        self._save(data)
        return data.currency

    def compute_spent(self) -> Currency:
        """Starting purse minus current purse, in copper, re-split.

        Sales feed the same purse, so this goes negative once a player has
        sold more than they bought.
        """
        data = self._require()
        spent = data.starting_currency.to_currency().to_copper() - data.currency.to_copper()
        return Currency.from_copper(spent)

    def summary(self) -> dict[str, Any]:
        data = self._require()
        return {
            "name": data.name,
            "starting_currency": data.starting_currency.to_currency().to_dict(),
            "current_currency": data.currency.to_dict(),
            "spent": self.compute_spent().to_dict(),
            "inventory": [line.model_dump() for line in data.inventory],
            "sold_items": [s.model_dump() for s in data.sold_items],
        }

    def finish(self) -> None:
        """Forget this market's record on the device. Nothing is exported."""
        self._store.remove(data_key(self.access_code))
        logger.info("Player data for market %s cleared", self.access_code)
