"""Player endpoints — no login, the access code is the credential.

GET  /player/{code}                                   — market view + window
GET  /player/{code}/status                            — window only (polled)
GET  /player/{code}/shops                             — shops, active markets only
GET  /player/{code}/shops/{shop_id}                   — items with live stock
POST /player/{code}/sessions                          — start an activity log
POST /player/{code}/purchase                          — validate and take stock
POST /player/{code}/sessions/{session_id}/transactions — log sell / end_session
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.mk_common.database import get_db_session
from src.mk_common.response import ApiResponse, respond
from src.mk_session.application.player_service import PlayerMarketService
from src.mk_session.application.purchase_service import PurchaseService
from src.mk_session.application.schemas import (
    CreateSessionRequest,
    PurchaseOut,
    PurchaseRequest,
    TransactionRequest,
)

router = APIRouter(prefix="/player", tags=["player"])

_players = PlayerMarketService()
_purchases = PurchaseService()

DB = Annotated[AsyncSession, Depends(get_db_session)]


@router.get("/{access_code}")
async def get_market(request: Request, access_code: str, db: DB) -> ApiResponse:
    result = await _players.get_market(db, access_code)
    return respond(request, result.model_dump())


@router.get("/{access_code}/status")
async def get_status(request: Request, access_code: str, db: DB) -> ApiResponse:
    result = await _players.get_status(db, access_code)
    return respond(request, result.model_dump())


@router.get("/{access_code}/shops")
async def list_shops(request: Request, access_code: str, db: DB) -> ApiResponse:
    shops = await _players.list_shops(db, access_code)
    return respond(request, {"shops": [s.model_dump() for s in shops]})


@router.get("/{access_code}/shops/{shop_id}")
async def get_shop(request: Request, access_code: str, shop_id: str, db: DB) -> ApiResponse:
    shop, items = await _players.get_shop_inventory(db, access_code, shop_id)
    return respond(
        request, {"shop": shop.model_dump(), "items": [i.model_dump() for i in items]}
    )


@router.post("/{access_code}/sessions", status_code=status.HTTP_201_CREATED)
async def create_session(
    request: Request, access_code: str, body: CreateSessionRequest, db: DB
) -> ApiResponse:
    result = await _players.create_session(db, access_code, body)
    return respond(request, result.model_dump(), "Session started")


@router.post("/{access_code}/purchase")
async def purchase(
    request: Request, access_code: str, body: PurchaseRequest, db: DB
) -> ApiResponse:
    result = await _purchases.purchase(db, access_code, body)
    return respond(
        request,
        PurchaseOut.from_domain(result).model_dump(),
        f"Successfully purchased {result.item_name}!",
    )


@router.post("/{access_code}/sessions/{session_id}/transactions")
async def add_transaction(
    request: Request,
    access_code: str,
    session_id: str,
    body: TransactionRequest,
    db: DB,
) -> ApiResponse:
    result = await _players.add_transaction(db, access_code, session_id, body)
    return respond(request, result.model_dump(), "Transaction recorded")
