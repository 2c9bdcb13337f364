"""Pydantic schemas for the item library API."""

from typing import Any

from pydantic import BaseModel, Field, field_validator

from src.mk_common.datetime_utils import iso_or_none
from src.mk_common.enums import ItemSource
from src.mk_common.limits import ITEMS_PER_LIBRARY, ITEMS_PER_LIBRARY_WARNING
from src.mk_library.domain.item_schema import item_to_document, parse_item
from src.mk_library.domain.models import ItemUsage, LibraryItem


def _validated_document(v: dict[str, Any]) -> dict[str, Any]:
    return item_to_document(parse_item(v))


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class CreateLibraryItemRequest(BaseModel):
    item: dict[str, Any]
    source: ItemSource = ItemSource.CUSTOM
    official_id: str | None = Field(None, max_length=128)

    @field_validator("item")
    @classmethod
    def validate_item(cls, v: dict[str, Any]) -> dict[str, Any]:
        return _validated_document(v)


class UpdateLibraryItemRequest(BaseModel):
    item: dict[str, Any] | None = None
    source: ItemSource | None = None
    official_id: str | None = Field(None, max_length=128)

    @field_validator("item")
    @classmethod
    def validate_item(cls, v: dict[str, Any] | None) -> dict[str, Any] | None:
        return _validated_document(v) if v is not None else None


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class LibraryItemOut(BaseModel):
    id: str
    dm_id: str
    item: dict[str, Any]
    source: str
    official_id: str | None
    created_at: str | None
    updated_at: str | None

    @classmethod
    def from_domain(cls, li: LibraryItem) -> "LibraryItemOut":
        return cls(
            id=li.id,
            dm_id=li.dm_id,
            item=li.item,
            source=li.source,
            official_id=li.official_id,
            created_at=iso_or_none(li.created_at),
            updated_at=iso_or_none(li.updated_at),
        )


class LibraryListResponse(BaseModel):
    items: list[LibraryItemOut]
    count: int
    limit: int = ITEMS_PER_LIBRARY
    near_limit: bool


def build_list_response(items: list[LibraryItem], total: int) -> LibraryListResponse:
    return LibraryListResponse(
        items=[LibraryItemOut.from_domain(i) for i in items],
        count=total,
        near_limit=total >= ITEMS_PER_LIBRARY_WARNING,
    )


class ItemUsageOut(BaseModel):
    item_id: str
    shop_count: int
    in_active_market: bool
    market_ids: list[str]

    @classmethod
    def from_domain(cls, usage: ItemUsage) -> "ItemUsageOut":
        return cls(
            item_id=usage.item_id,
            shop_count=usage.shop_count,
            in_active_market=usage.in_active_market,
            market_ids=usage.market_ids,
        )
