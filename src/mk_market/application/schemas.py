"""Pydantic schemas for market endpoints."""

from datetime import datetime

from pydantic import BaseModel, Field

from config.settings import settings
from src.mk_common.datetime_utils import iso_or_none
from src.mk_market.domain.lifecycle import seconds_remaining, window_status
from src.mk_market.domain.models import Market


def shareable_url(access_code: str) -> str:
    return f"{settings.PUBLIC_BASE_URL.rstrip('/')}/market/{access_code}"


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class CreateMarketRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str = Field("", max_length=2000)


class UpdateMarketRequest(BaseModel):
    """The access code is fixed at creation and cannot be edited."""

    name: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = Field(None, max_length=2000)


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class WindowStatusOut(BaseModel):
    state: str
    is_active: bool
    active_until: str | None
    seconds_remaining: int

    @classmethod
    def from_domain(cls, m: Market, now: datetime) -> "WindowStatusOut":
        return cls(
            state=window_status(m, now).value,
            is_active=m.is_active,
            active_until=iso_or_none(m.active_until),
            seconds_remaining=seconds_remaining(m, now),
        )


class MarketOut(BaseModel):
    id: str
    dm_id: str
    name: str
    description: str
    access_code: str
    shareable_url: str
    is_active: bool
    active_until: str | None
    created_at: str | None
    updated_at: str | None

    @classmethod
    def from_domain(cls, m: Market) -> "MarketOut":
        return cls(
            id=m.id,
            dm_id=m.dm_id,
            name=m.name,
            description=m.description,
            access_code=m.access_code,
            shareable_url=shareable_url(m.access_code),
            is_active=m.is_active,
            active_until=iso_or_none(m.active_until),
            created_at=iso_or_none(m.created_at),
            updated_at=iso_or_none(m.updated_at),
        )


class PublicMarketOut(BaseModel):
    """What a player sees on entry: no owner id, plus the window state."""

    id: str
    name: str
    description: str
    access_code: str
    window: WindowStatusOut

    @classmethod
    def from_domain(cls, m: Market, now: datetime) -> "PublicMarketOut":
        return cls(
            id=m.id,
            name=m.name,
            description=m.description,
            access_code=m.access_code,
            window=WindowStatusOut.from_domain(m, now),
        )
