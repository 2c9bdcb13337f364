"""Integer arithmetic for the three-denomination coin purse.

1 gp = 10 sp = 100 cp. All comparisons and sums go through copper; results
are re-split greedily into the highest denominations. No float, no Decimal.
"""

from dataclasses import dataclass

CP_PER_SP = 10
CP_PER_GP = 100

_DENOMINATIONS = (("gp", CP_PER_GP), ("sp", CP_PER_SP), ("cp", 1))


@dataclass(frozen=True)
class Currency:
    gp: int = 0
    sp: int = 0
    cp: int = 0

    def to_copper(self) -> int:
        return self.gp * CP_PER_GP + self.sp * CP_PER_SP + self.cp

    @classmethod
    def from_copper(cls, total: int) -> "Currency":
        """Split a copper total into gp/sp/cp.

        Negative totals are split by magnitude and every part negated,
        so -150 becomes (-1 gp, -5 sp, 0 cp) rather than (-2 gp, 5 sp).
        """
        sign = -1 if total < 0 else 1
        remaining = abs(total)
        gp, remaining = divmod(remaining, CP_PER_GP)
        sp, cp = divmod(remaining, CP_PER_SP)
        return cls(gp=sign * gp, sp=sign * sp, cp=sign * cp)

    @classmethod
    def from_single(cls, amount: int, denomination: str) -> "Currency":
        if denomination not in dict(_DENOMINATIONS):
            raise ValueError(f"Unknown denomination: {denomination}")
        return cls(**{denomination: amount})

    def to_dict(self) -> dict[str, int]:
        return {"gp": self.gp, "sp": self.sp, "cp": self.cp}

    def has_positive_denomination(self) -> bool:
        return self.gp > 0 or self.sp > 0 or self.cp > 0

    def times(self, quantity: int) -> "Currency":
        """Per-denomination multiply, not normalised."""
        return Currency(gp=self.gp * quantity, sp=self.sp * quantity, cp=self.cp * quantity)

    def plus(self, other: "Currency") -> "Currency":
        """Per-denomination sum, not normalised (used for running line totals)."""
        return Currency(gp=self.gp + other.gp, sp=self.sp + other.sp, cp=self.cp + other.cp)


def subtract(wallet: Currency, price: Currency) -> Currency | None:
    """Pay price out of wallet. None when the wallet cannot cover it."""
    remaining = wallet.to_copper() - price.to_copper()
    if remaining < 0:
        return None
    return Currency.from_copper(remaining)
