"""Pydantic schemas for shop and shop item endpoints."""

from typing import Any

from pydantic import BaseModel, Field

from src.mk_common.currency import Currency
from src.mk_common.datetime_utils import iso_or_none
from src.mk_common.enums import ShopCategory
from src.mk_shop.domain.models import Shop, ShopItem

# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class PriceIn(BaseModel):
    gp: int = Field(0, ge=0)
    sp: int = Field(0, ge=0)
    cp: int = Field(0, ge=0)

    def to_domain(self) -> Currency:
        return Currency(gp=self.gp, sp=self.sp, cp=self.cp)


class CreateShopRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    category: ShopCategory
    location: str = Field("", max_length=200)
    description: str = Field("", max_length=2000)
    shopkeeper: str | None = Field(None, max_length=100)
    tags: list[str] = Field(default_factory=list)


class UpdateShopRequest(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=100)
    category: ShopCategory | None = None
    location: str | None = Field(None, max_length=200)
    description: str | None = Field(None, max_length=2000)
    shopkeeper: str | None = Field(None, max_length=100)
    tags: list[str] | None = None


class ReorderRequest(BaseModel):
    shop_ids: list[str] = Field(..., min_length=1)


class AddShopItemRequest(BaseModel):
    item_library_id: str
    price: PriceIn | None = None          # None: use the library item's cost
    stock: int | None = Field(None, ge=0)  # None: unlimited


class UpdateShopItemRequest(BaseModel):
    """stock is only applied when sent; an explicit null makes it unlimited."""

    price: PriceIn | None = None
    stock: int | None = Field(None, ge=0)
    refresh_snapshot: bool = False

    @property
    def stock_sent(self) -> bool:
        return "stock" in self.model_fields_set


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class ShopOut(BaseModel):
    id: str
    market_id: str
    name: str
    category: str
    location: str
    description: str
    shopkeeper: str | None
    tags: list[str]
    display_order: int
    created_at: str | None
    updated_at: str | None

    @classmethod
    def from_domain(cls, s: Shop) -> "ShopOut":
        return cls(
            id=s.id,
            market_id=s.market_id,
            name=s.name,
            category=s.category,
            location=s.location,
            description=s.description,
            shopkeeper=s.shopkeeper,
            tags=s.tags,
            display_order=s.display_order,
            created_at=iso_or_none(s.created_at),
            updated_at=iso_or_none(s.updated_at),
        )


class ShopItemOut(BaseModel):
    id: str
    shop_id: str
    market_id: str
    item_library_id: str
    name: str
    price: dict[str, int]
    stock: int | None
    original_stock: int | None
    item: dict[str, Any]
    created_at: str | None
    updated_at: str | None

    @classmethod
    def from_domain(cls, si: ShopItem) -> "ShopItemOut":
        return cls(
            id=si.id,
            shop_id=si.shop_id,
            market_id=si.market_id,
            item_library_id=si.item_library_id,
            name=si.name,
            price=si.price.to_dict(),
            stock=si.stock,
            original_stock=si.original_stock,
            item=si.item_snapshot,
            created_at=iso_or_none(si.created_at),
            updated_at=iso_or_none(si.updated_at),
        )
