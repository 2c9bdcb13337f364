"""Domain models for mk_market — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Market:
    id: str
    dm_id: str
    name: str
    description: str
    access_code: str           # slugify(name) + "-" + 6 base-36 chars, immutable
    is_active: bool = False
    active_until: datetime | None = None   # None whenever is_active is False
    created_at: datetime | None = None
    updated_at: datetime | None = None
