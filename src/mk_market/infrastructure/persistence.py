"""MarketRepository — concrete implementation of MarketRepositoryProtocol.

All queries use raw text() SQL (no ORM).
asyncpg NULL parameter pattern: CAST(:param AS TYPE) required for None values.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.mk_common.rows import as_str_id
from src.mk_market.domain.models import Market

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_COLUMNS = """
    id, dm_id, name, description, access_code, is_active, active_until,
    created_at, updated_at
"""

_COUNT_BY_DM_SQL = text("SELECT COUNT(*) AS n FROM markets WHERE dm_id = :dm_id")

_INSERT_SQL = text(f"""
    INSERT INTO markets (dm_id, name, description, access_code, is_active, active_until)
    VALUES (:dm_id, :name, :description, :access_code, FALSE, NULL)
    RETURNING {_COLUMNS}
""")

_GET_BY_ID_SQL = text(f"SELECT {_COLUMNS} FROM markets WHERE id = :market_id")

_GET_BY_CODE_SQL = text(f"SELECT {_COLUMNS} FROM markets WHERE access_code = :access_code")

# No unique index backs "one active market per DM"; LIMIT 1 keeps reads sane
# if a race ever leaves two rows active.
_GET_ACTIVE_BY_DM_SQL = text(f"""
    SELECT {_COLUMNS} FROM markets
    WHERE dm_id = :dm_id AND is_active = TRUE
    ORDER BY active_until DESC NULLS LAST
    LIMIT 1
""")

_LIST_BY_DM_SQL = text(f"""
    SELECT {_COLUMNS} FROM markets
    WHERE dm_id = :dm_id
    ORDER BY created_at DESC, id DESC
""")

_UPDATE_DETAILS_SQL = text(f"""
    UPDATE markets
    SET name        = COALESCE(CAST(:name AS TEXT), name),
        description = COALESCE(CAST(:description AS TEXT), description),
        updated_at  = NOW()
    WHERE id = :market_id
    RETURNING {_COLUMNS}
""")

_SET_ACTIVE_SQL = text(f"""
    UPDATE markets
    SET is_active = TRUE, active_until = :active_until, updated_at = NOW()
    WHERE id = :market_id
    RETURNING {_COLUMNS}
""")

_SET_INACTIVE_SQL = text(f"""
    UPDATE markets
    SET is_active = FALSE, active_until = NULL, updated_at = NOW()
    WHERE id = :market_id
    RETURNING {_COLUMNS}
""")

_DELETE_SQL = text("DELETE FROM markets WHERE id = :market_id")

# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _row_to_market(row: Any) -> Market:
    return Market(
        id=as_str_id(row.id),
        dm_id=as_str_id(row.dm_id),
        name=row.name,
        description=row.description,
        access_code=row.access_code,
        is_active=row.is_active,
        active_until=row.active_until,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class MarketRepository:
    async def count_by_dm(self, db: AsyncSession, dm_id: str) -> int:
        result = await db.execute(_COUNT_BY_DM_SQL, {"dm_id": dm_id})
        return int(result.scalar_one())

    async def create(
        self,
        db: AsyncSession,
        dm_id: str,
        name: str,
        description: str,
        access_code: str,
    ) -> Market:
        result = await db.execute(
            _INSERT_SQL,
            {
                "dm_id": dm_id,
                "name": name,
                "description": description,
                "access_code": access_code,
            },
        )
        return _row_to_market(result.fetchone())

    async def get_by_id(self, db: AsyncSession, market_id: str) -> Market | None:
        result = await db.execute(_GET_BY_ID_SQL, {"market_id": market_id})
        row = result.fetchone()
        return _row_to_market(row) if row else None

    async def get_by_access_code(
        self, db: AsyncSession, access_code: str
    ) -> Market | None:
        result = await db.execute(_GET_BY_CODE_SQL, {"access_code": access_code})
        row = result.fetchone()
        return _row_to_market(row) if row else None

    async def get_active_by_dm(self, db: AsyncSession, dm_id: str) -> Market | None:
        result = await db.execute(_GET_ACTIVE_BY_DM_SQL, {"dm_id": dm_id})
        row = result.fetchone()
        return _row_to_market(row) if row else None

    async def list_by_dm(self, db: AsyncSession, dm_id: str) -> list[Market]:
        result = await db.execute(_LIST_BY_DM_SQL, {"dm_id": dm_id})
        return [_row_to_market(row) for row in result.fetchall()]

    async def update_details(
        self,
        db: AsyncSession,
        market_id: str,
        name: str | None,
        description: str | None,
    ) -> Market | None:
        result = await db.execute(
            _UPDATE_DETAILS_SQL,
            {"market_id": market_id, "name": name, "description": description},
        )
        row = result.fetchone()
        return _row_to_market(row) if row else None

    async def set_active(
        self, db: AsyncSession, market_id: str, active_until: datetime
    ) -> Market | None:
        result = await db.execute(
            _SET_ACTIVE_SQL, {"market_id": market_id, "active_until": active_until}
        )
        row = result.fetchone()
        return _row_to_market(row) if row else None

    async def set_inactive(self, db: AsyncSession, market_id: str) -> Market | None:
        result = await db.execute(_SET_INACTIVE_SQL, {"market_id": market_id})
        row = result.fetchone()
        return _row_to_market(row) if row else None

    async def delete(self, db: AsyncSession, market_id: str) -> None:
        await db.execute(_DELETE_SQL, {"market_id": market_id})
