"""PlayerSessionRepository — the DM-visible player activity log.

Transactions are appended to a JSONB array with the || operator so a
purchase never rewrites other entries.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.mk_common.rows import as_json, as_str_id, to_json_param
from src.mk_session.domain.models import PlayerSession, Transaction

_COLUMNS = "id, market_id, player_name, entered_at, last_active_at, transactions"

_INSERT_SQL = text(f"""
    INSERT INTO player_sessions (market_id, player_name, entered_at, last_active_at, transactions)
    VALUES (:market_id, :player_name, :now, :now, '[]'::jsonb)
    RETURNING {_COLUMNS}
""")

_GET_SQL = text(f"SELECT {_COLUMNS} FROM player_sessions WHERE id = :session_id")

_APPEND_SQL = text("""
    UPDATE player_sessions
    SET transactions   = transactions || CAST(:entry AS JSONB),
        last_active_at = :timestamp
    WHERE id = :session_id
""")

_LIST_BY_MARKET_SQL = text(f"""
    SELECT {_COLUMNS} FROM player_sessions
    WHERE market_id = :market_id
    ORDER BY last_active_at DESC
""")

_DELETE_BY_MARKET_SQL = text("DELETE FROM player_sessions WHERE market_id = :market_id")


def _transaction_from_json(data: dict[str, Any]) -> Transaction:
    return Transaction(
        type=data["type"],
        item_name=data.get("item_name", ""),
        quantity=int(data.get("quantity", 1)),
        timestamp=datetime.fromisoformat(data["timestamp"]),
    )


def _transaction_to_json(t: Transaction) -> dict[str, Any]:
    return {
        "type": t.type,
        "item_name": t.item_name,
        "quantity": t.quantity,
        "timestamp": t.timestamp.isoformat(),
    }


def _row_to_session(row: Any) -> PlayerSession:
    return PlayerSession(
        id=as_str_id(row.id),
        market_id=as_str_id(row.market_id),
        player_name=row.player_name,
        entered_at=row.entered_at,
        last_active_at=row.last_active_at,
        transactions=[_transaction_from_json(t) for t in as_json(row.transactions) or []],
    )


class PlayerSessionRepository:
    async def create(
        self, db: AsyncSession, market_id: str, player_name: str, now: datetime
    ) -> PlayerSession:
        result = await db.execute(
            _INSERT_SQL, {"market_id": market_id, "player_name": player_name, "now": now}
        )
        return _row_to_session(result.fetchone())

    async def get_by_id(self, db: AsyncSession, session_id: str) -> PlayerSession | None:
        result = await db.execute(_GET_SQL, {"session_id": session_id})
        row = result.fetchone()
        return _row_to_session(row) if row else None

    async def append_transaction(
        self, db: AsyncSession, session_id: str, transaction: Transaction
    ) -> bool:
        # JSONB || with an array operand appends its elements
        result = await db.execute(
            _APPEND_SQL,
            {
                "session_id": session_id,
                "entry": to_json_param([_transaction_to_json(transaction)]),
                "timestamp": transaction.timestamp,
            },
        )
        return (result.rowcount or 0) > 0

    async def list_by_market(self, db: AsyncSession, market_id: str) -> list[PlayerSession]:
        result = await db.execute(_LIST_BY_MARKET_SQL, {"market_id": market_id})
        return [_row_to_session(row) for row in result.fetchall()]

    async def delete_by_market(self, db: AsyncSession, market_id: str) -> int:
        result = await db.execute(_DELETE_BY_MARKET_SQL, {"market_id": market_id})
        return result.rowcount or 0
