"""Pure rules for the market activation window and access codes.

A market is live for a fixed window after activation. Nothing sweeps
expired markets in the background: readers compare active_until with the
clock and deactivate on the spot (see MarketLifecycleService.reconcile_expiry).
"""

import re
import secrets
import string
from datetime import datetime, timedelta

from src.mk_common.enums import WindowState
from src.mk_market.domain.models import Market

ACTIVATION_WINDOW = timedelta(hours=3)
CLOSING_SOON = timedelta(minutes=5)

ACCESS_CODE_SUFFIX_LENGTH = 6
_BASE36 = string.digits + string.ascii_lowercase
_NON_SLUG = re.compile(r"[^a-z0-9]+")


def slugify(name: str) -> str:
    """'The Rusty Anvil!' -> 'the-rusty-anvil-'."""
    return _NON_SLUG.sub("-", name.lower())


def generate_access_code(name: str) -> str:
    suffix = "".join(secrets.choice(_BASE36) for _ in range(ACCESS_CODE_SUFFIX_LENGTH))
    return f"{slugify(name)}-{suffix}"


def activation_deadline(now: datetime) -> datetime:
    return now + ACTIVATION_WINDOW


def is_expired(market: Market, now: datetime) -> bool:
    """True only for an active market whose window has already closed."""
    if not market.is_active or market.active_until is None:
        return False
    return market.active_until <= now


def seconds_remaining(market: Market, now: datetime) -> int:
    if not market.is_active or market.active_until is None:
        return 0
    return max(0, int((market.active_until - now).total_seconds()))


def window_status(market: Market, now: datetime) -> WindowState:
    if not market.is_active or market.active_until is None or is_expired(market, now):
        return WindowState.CLOSED
    if market.active_until - now <= CLOSING_SOON:
        return WindowState.CLOSING_SOON
    return WindowState.ACTIVE
