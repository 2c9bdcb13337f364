"""Shop and shop item endpoints (DM only).

GET    /markets/{market_id}/shops          — shops in display order
POST   /markets/{market_id}/shops          — create (appended last)
PUT    /markets/{market_id}/shops/reorder  — set display order
GET    /shops/{shop_id}                    — detail
PATCH  /shops/{shop_id}                    — update
DELETE /shops/{shop_id}                    — delete with its items
GET    /shops/{shop_id}/items              — item bindings
POST   /shops/{shop_id}/items              — bind a library item
GET    /shop-items/{shop_item_id}          — one binding
PATCH  /shop-items/{shop_item_id}          — price / stock / snapshot refresh
DELETE /shop-items/{shop_item_id}          — unbind
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.mk_common.database import get_db_session
from src.mk_common.response import ApiResponse, respond
from src.mk_gateway.auth.dependencies import get_current_dm
from src.mk_gateway.dm.db_models import DMModel
from src.mk_shop.application.schemas import (
    AddShopItemRequest,
    CreateShopRequest,
    ReorderRequest,
    UpdateShopItemRequest,
    UpdateShopRequest,
)
from src.mk_shop.application.service import ShopApplicationService

router = APIRouter(tags=["shops"])

_service = ShopApplicationService()

CurrentDM = Annotated[DMModel, Depends(get_current_dm)]
DB = Annotated[AsyncSession, Depends(get_db_session)]


@router.get("/markets/{market_id}/shops")
async def list_shops(request: Request, market_id: str, dm: CurrentDM, db: DB) -> ApiResponse:
    shops = await _service.list_shops(db, str(dm.id), market_id)
    return respond(request, {"shops": [s.model_dump() for s in shops]})


@router.post("/markets/{market_id}/shops", status_code=status.HTTP_201_CREATED)
async def create_shop(
    request: Request, market_id: str, body: CreateShopRequest, dm: CurrentDM, db: DB
) -> ApiResponse:
    shop = await _service.create_shop(db, str(dm.id), market_id, body)
    return respond(request, shop.model_dump(), "Shop created")


@router.put("/markets/{market_id}/shops/reorder")
async def reorder_shops(
    request: Request, market_id: str, body: ReorderRequest, dm: CurrentDM, db: DB
) -> ApiResponse:
    shops = await _service.reorder_shops(db, str(dm.id), market_id, body)
    return respond(request, {"shops": [s.model_dump() for s in shops]}, "Shops reordered")


@router.get("/shops/{shop_id}")
async def get_shop(request: Request, shop_id: str, dm: CurrentDM, db: DB) -> ApiResponse:
    shop = await _service.get_shop(db, str(dm.id), shop_id)
    return respond(request, shop.model_dump())


@router.patch("/shops/{shop_id}")
async def update_shop(
    request: Request, shop_id: str, body: UpdateShopRequest, dm: CurrentDM, db: DB
) -> ApiResponse:
    shop = await _service.update_shop(db, str(dm.id), shop_id, body)
    return respond(request, shop.model_dump(), "Shop updated")


@router.delete("/shops/{shop_id}")
async def delete_shop(request: Request, shop_id: str, dm: CurrentDM, db: DB) -> ApiResponse:
    await _service.delete_shop(db, str(dm.id), shop_id)
    return respond(request, {"id": shop_id}, "Shop deleted")


@router.get("/shops/{shop_id}/items")
async def list_shop_items(
    request: Request, shop_id: str, dm: CurrentDM, db: DB
) -> ApiResponse:
    items = await _service.list_items(db, str(dm.id), shop_id)
    return respond(request, {"items": [i.model_dump() for i in items]})


@router.post("/shops/{shop_id}/items", status_code=status.HTTP_201_CREATED)
async def add_shop_item(
    request: Request, shop_id: str, body: AddShopItemRequest, dm: CurrentDM, db: DB
) -> ApiResponse:
    item = await _service.add_item(db, str(dm.id), shop_id, body)
    return respond(request, item.model_dump(), "Item added to shop")


@router.get("/shop-items/{shop_item_id}")
async def get_shop_item(
    request: Request, shop_item_id: str, dm: CurrentDM, db: DB
) -> ApiResponse:
    item = await _service.get_item(db, str(dm.id), shop_item_id)
    return respond(request, item.model_dump())


@router.patch("/shop-items/{shop_item_id}")
async def update_shop_item(
    request: Request,
    shop_item_id: str,
    body: UpdateShopItemRequest,
    dm: CurrentDM,
    db: DB,
) -> ApiResponse:
    item = await _service.update_item(db, str(dm.id), shop_item_id, body)
    return respond(request, item.model_dump(), "Shop item updated")


@router.delete("/shop-items/{shop_item_id}")
async def remove_shop_item(
    request: Request, shop_item_id: str, dm: CurrentDM, db: DB
) -> ApiResponse:
    await _service.remove_item(db, str(dm.id), shop_item_id)
    return respond(request, {"id": shop_item_id}, "Item removed from shop")
