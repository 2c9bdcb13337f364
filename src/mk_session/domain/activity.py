"""Rendering of a player's transaction list for the DM activity feed."""

from src.mk_common.enums import TransactionType
from src.mk_session.domain.models import Transaction

END_SESSION_MARK = "❮"
NO_ACTIVITY = "No activity yet"


def format_transaction(t: Transaction) -> str:
    if t.type == TransactionType.END_SESSION.value:
        return END_SESSION_MARK
    prefix = "+" if t.type == TransactionType.BUY.value else "-"
    qty = f" ({t.quantity})" if t.quantity > 1 else ""
    return f"{prefix}{t.item_name}{qty}"


def format_transactions(transactions: list[Transaction]) -> str:
    """[buy Sword x2, sell Potion, end] -> '+Sword (2), -Potion, ❮'."""
    if not transactions:
        return NO_ACTIVITY
    return ", ".join(format_transaction(t) for t in transactions)
