"""Shop item price rules."""

from src.mk_common.currency import Currency
from src.mk_common.errors import InvalidPriceError


def validate_price(price: Currency | None) -> Currency:
    """A price needs non-negative parts and at least one positive one."""
    if price is None or price.gp < 0 or price.sp < 0 or price.cp < 0:
        raise InvalidPriceError()
    if not price.has_positive_denomination():
        raise InvalidPriceError()
    return price
