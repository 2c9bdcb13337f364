"""Item library endpoints (DM only).

GET    /library                 — list, optional type/source/search filters
POST   /library                 — create
GET    /library/item-types      — per-type field schema for forms
GET    /library/{item_id}       — detail
PATCH  /library/{item_id}       — update
DELETE /library/{item_id}       — delete (removes shop bindings too)
GET    /library/{item_id}/usage — shop binding count, active-market flag
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.mk_common.database import get_db_session
from src.mk_common.enums import ItemSource, ItemType
from src.mk_common.response import ApiResponse, respond
from src.mk_gateway.auth.dependencies import get_current_dm
from src.mk_gateway.dm.db_models import DMModel
from src.mk_library.application.schemas import (
    CreateLibraryItemRequest,
    UpdateLibraryItemRequest,
)
from src.mk_library.application.service import LibraryApplicationService
from src.mk_library.domain.item_schema import item_type_fields

router = APIRouter(prefix="/library", tags=["library"])

_service = LibraryApplicationService()

CurrentDM = Annotated[DMModel, Depends(get_current_dm)]
DB = Annotated[AsyncSession, Depends(get_db_session)]


@router.get("")
async def list_items(
    request: Request,
    dm: CurrentDM,
    db: DB,
    item_type: ItemType | None = Query(None, alias="type"),
    source: ItemSource | None = Query(None),
    search: str | None = Query(None, max_length=100),
) -> ApiResponse:
    result = await _service.list_items(
        db,
        str(dm.id),
        item_type.value if item_type else None,
        source.value if source else None,
        search,
    )
    return respond(request, result.model_dump())


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_item(
    request: Request, body: CreateLibraryItemRequest, dm: CurrentDM, db: DB
) -> ApiResponse:
    result = await _service.create_item(db, str(dm.id), body)
    return respond(request, result.model_dump(), "Item created")


@router.get("/item-types")
async def get_item_types(request: Request, dm: CurrentDM) -> ApiResponse:
    return respond(request, item_type_fields())


@router.get("/{item_id}")
async def get_item(request: Request, item_id: str, dm: CurrentDM, db: DB) -> ApiResponse:
    result = await _service.get_item(db, str(dm.id), item_id)
    return respond(request, result.model_dump())


@router.patch("/{item_id}")
async def update_item(
    request: Request,
    item_id: str,
    body: UpdateLibraryItemRequest,
    dm: CurrentDM,
    db: DB,
) -> ApiResponse:
    result = await _service.update_item(db, str(dm.id), item_id, body)
    return respond(request, result.model_dump(), "Item updated")


@router.delete("/{item_id}")
async def delete_item(request: Request, item_id: str, dm: CurrentDM, db: DB) -> ApiResponse:
    await _service.delete_item(db, str(dm.id), item_id)
    return respond(request, {"id": item_id}, "Item deleted")


@router.get("/{item_id}/usage")
async def get_usage(request: Request, item_id: str, dm: CurrentDM, db: DB) -> ApiResponse:
    result = await _service.get_usage(db, str(dm.id), item_id)
    return respond(request, result.model_dump())
