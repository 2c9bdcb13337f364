"""Market endpoints (DM only).

GET    /markets                         — the DM's markets, newest first
POST   /markets                         — create (inactive)
GET    /markets/active                  — the DM's active market or null
GET    /markets/{market_id}             — detail + window status
PATCH  /markets/{market_id}             — rename / describe
DELETE /markets/{market_id}             — delete with shops and items
POST   /markets/{market_id}/activate    — open the three-hour window
POST   /markets/{market_id}/deactivate  — close it and reset stock
GET    /markets/{market_id}/players     — player activity feed
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.mk_common.database import get_db_session
from src.mk_common.response import ApiResponse, respond
from src.mk_gateway.auth.dependencies import get_current_dm
from src.mk_gateway.dm.db_models import DMModel
from src.mk_market.application.schemas import (
    CreateMarketRequest,
    MarketOut,
    UpdateMarketRequest,
)
from src.mk_market.application.service import MarketLifecycleService
from src.mk_session.application.schemas import PlayerSessionOut

router = APIRouter(prefix="/markets", tags=["markets"])

_service = MarketLifecycleService()

CurrentDM = Annotated[DMModel, Depends(get_current_dm)]
DB = Annotated[AsyncSession, Depends(get_db_session)]


@router.get("")
async def list_markets(request: Request, dm: CurrentDM, db: DB) -> ApiResponse:
    markets = await _service.list_markets(db, str(dm.id))
    return respond(request, {"markets": [MarketOut.from_domain(m).model_dump() for m in markets]})


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_market(
    request: Request, body: CreateMarketRequest, dm: CurrentDM, db: DB
) -> ApiResponse:
    market = await _service.create_market(db, str(dm.id), body)
    return respond(request, MarketOut.from_domain(market).model_dump(), "Market created")


@router.get("/active")
async def get_active_market(request: Request, dm: CurrentDM, db: DB) -> ApiResponse:
    market = await _service.get_active_market(db, str(dm.id))
    if market is None:
        return respond(request, None)
    data = MarketOut.from_domain(market).model_dump()
    data["window"] = _service.window_status(market).model_dump()
    return respond(request, data)


@router.get("/{market_id}")
async def get_market(request: Request, market_id: str, dm: CurrentDM, db: DB) -> ApiResponse:
    market = await _service.get_market(db, str(dm.id), market_id)
    data = MarketOut.from_domain(market).model_dump()
    data["window"] = _service.window_status(market).model_dump()
    return respond(request, data)


@router.patch("/{market_id}")
async def update_market(
    request: Request, market_id: str, body: UpdateMarketRequest, dm: CurrentDM, db: DB
) -> ApiResponse:
    market = await _service.update_market(db, str(dm.id), market_id, body)
    return respond(request, MarketOut.from_domain(market).model_dump(), "Market updated")


@router.delete("/{market_id}")
async def delete_market(request: Request, market_id: str, dm: CurrentDM, db: DB) -> ApiResponse:
    await _service.delete_market(db, str(dm.id), market_id)
    return respond(request, {"id": market_id}, "Market deleted")


@router.post("/{market_id}/activate")
async def activate_market(
    request: Request, market_id: str, dm: CurrentDM, db: DB
) -> ApiResponse:
    market = await _service.activate_market(db, str(dm.id), market_id)
    data = MarketOut.from_domain(market).model_dump()
    data["window"] = _service.window_status(market).model_dump()
    return respond(request, data, "Market activated")


@router.post("/{market_id}/deactivate")
async def deactivate_market(
    request: Request, market_id: str, dm: CurrentDM, db: DB
) -> ApiResponse:
    market = await _service.deactivate_market(db, str(dm.id), market_id)
    return respond(request, MarketOut.from_domain(market).model_dump(), "Market deactivated")


@router.get("/{market_id}/players")
async def list_players(request: Request, market_id: str, dm: CurrentDM, db: DB) -> ApiResponse:
    sessions = await _service.list_players(db, str(dm.id), market_id)
    return respond(
        request, {"players": [PlayerSessionOut.from_domain(s).model_dump() for s in sessions]}
    )
