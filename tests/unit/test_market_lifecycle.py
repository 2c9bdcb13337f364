"""Tests for the pure activation-window rules in mk_market.domain.lifecycle."""

import re
from datetime import UTC, datetime, timedelta

from src.mk_common.enums import WindowState
from src.mk_market.domain.lifecycle import (
    ACTIVATION_WINDOW,
    activation_deadline,
    generate_access_code,
    is_expired,
    seconds_remaining,
    slugify,
    window_status,
)
from src.mk_market.domain.models import Market

NOW = datetime(2026, 3, 1, 19, 0, tzinfo=UTC)


def _market(is_active: bool = False, active_until: datetime | None = None) -> Market:
    return Market(
        id="m-1", dm_id="dm-1", name="Goblin Bazaar", description="",
        access_code="goblin-bazaar-abc123", is_active=is_active, active_until=active_until,
    )


class TestAccessCode:
    def test_slugify(self) -> None:
        assert slugify("The Rusty Anvil") == "the-rusty-anvil"
        assert slugify("Bob's  Wares!!") == "bob-s-wares-"

    def test_code_shape(self) -> None:
        code = generate_access_code("Goblin Bazaar")
        assert re.fullmatch(r"goblin-bazaar-[0-9a-z]{6}", code)

    def test_codes_differ(self) -> None:
        codes = {generate_access_code("X") for _ in range(20)}
        assert len(codes) > 1


class TestWindow:
    def test_deadline_is_three_hours(self) -> None:
        assert ACTIVATION_WINDOW == timedelta(hours=3)
        assert activation_deadline(NOW) == NOW + timedelta(hours=3)

    def test_inactive_never_expired(self) -> None:
        assert not is_expired(_market(), NOW)

    def test_expired_at_deadline(self) -> None:
        assert is_expired(_market(True, NOW), NOW)
        assert not is_expired(_market(True, NOW + timedelta(seconds=1)), NOW)

    def test_status_active(self) -> None:
        m = _market(True, NOW + timedelta(hours=1))
        assert window_status(m, NOW) is WindowState.ACTIVE
        assert seconds_remaining(m, NOW) == 3600

    def test_status_closing_soon_in_last_five_minutes(self) -> None:
        m = _market(True, NOW + timedelta(minutes=4))
        assert window_status(m, NOW) is WindowState.CLOSING_SOON

    def test_status_closed(self) -> None:
        assert window_status(_market(), NOW) is WindowState.CLOSED
        assert window_status(_market(True, NOW - timedelta(minutes=1)), NOW) is WindowState.CLOSED
        assert seconds_remaining(_market(), NOW) == 0
