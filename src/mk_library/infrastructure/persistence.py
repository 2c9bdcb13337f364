"""LibraryRepository — concrete implementation of LibraryRepositoryProtocol.

All queries use raw text() SQL. The item document is JSONB; item_type and
name are copied out of it into plain columns for filtering and search.
asyncpg NULL parameter pattern: CAST(:param AS TYPE) IS NULL.
"""

from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.mk_common.rows import as_json, as_str_id, to_json_param
from src.mk_library.domain.models import ItemUsage, LibraryItem

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_COLUMNS = "id, dm_id, item, source, official_id, created_at, updated_at"

_COUNT_BY_DM_SQL = text("SELECT COUNT(*) AS n FROM item_library WHERE dm_id = :dm_id")

_INSERT_SQL = text(f"""
    INSERT INTO item_library (dm_id, item, item_type, name, source, official_id)
    VALUES (:dm_id, CAST(:item AS JSONB), :item_type, :name, :source, :official_id)
    RETURNING {_COLUMNS}
""")

_GET_SQL = text(f"SELECT {_COLUMNS} FROM item_library WHERE id = :item_id")

_LIST_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM item_library
    WHERE dm_id = :dm_id
      AND (CAST(:item_type AS TEXT) IS NULL OR item_type = CAST(:item_type AS TEXT))
      AND (CAST(:source AS TEXT) IS NULL OR source = CAST(:source AS TEXT))
      AND (CAST(:search AS TEXT) IS NULL OR name ILIKE '%' || CAST(:search AS TEXT) || '%')
    ORDER BY created_at DESC, id DESC
""")

_UPDATE_SQL = text(f"""
    UPDATE item_library
    SET item        = COALESCE(CAST(:item AS JSONB), item),
        item_type   = COALESCE(CAST(:item_type AS TEXT), item_type),
        name        = COALESCE(CAST(:name AS TEXT), name),
        source      = COALESCE(CAST(:source AS TEXT), source),
        official_id = COALESCE(CAST(:official_id AS TEXT), official_id),
        updated_at  = NOW()
    WHERE id = :item_id
    RETURNING {_COLUMNS}
""")

_DELETE_SQL = text("DELETE FROM item_library WHERE id = :item_id")

_USAGE_SQL = text("""
    SELECT si.market_id, m.is_active
    FROM shop_items si
    JOIN markets m ON m.id = si.market_id
    WHERE si.item_library_id = :item_id
""")

# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _row_to_item(row: Any) -> LibraryItem:
    return LibraryItem(
        id=as_str_id(row.id),
        dm_id=as_str_id(row.dm_id),
        item=as_json(row.item),
        source=row.source,
        official_id=row.official_id,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class LibraryRepository:
    """Caller owns the transaction (commit/rollback in the application service)."""

    async def count_by_dm(self, db: AsyncSession, dm_id: str) -> int:
        result = await db.execute(_COUNT_BY_DM_SQL, {"dm_id": dm_id})
        return int(result.scalar_one())

    async def create(
        self,
        db: AsyncSession,
        dm_id: str,
        item: dict[str, Any],
        source: str,
        official_id: str | None,
    ) -> LibraryItem:
        result = await db.execute(
            _INSERT_SQL,
            {
                "dm_id": dm_id,
                "item": to_json_param(item),
                "item_type": item["type"],
                "name": item["name"],
                "source": source,
                "official_id": official_id,
            },
        )
        return _row_to_item(result.fetchone())

    async def get_by_id(self, db: AsyncSession, item_id: str) -> LibraryItem | None:
        result = await db.execute(_GET_SQL, {"item_id": item_id})
        row = result.fetchone()
        return _row_to_item(row) if row else None

    async def list_by_dm(
        self,
        db: AsyncSession,
        dm_id: str,
        item_type: str | None,
        source: str | None,
        search: str | None,
    ) -> list[LibraryItem]:
        result = await db.execute(
            _LIST_SQL,
            {"dm_id": dm_id, "item_type": item_type, "source": source, "search": search},
        )
        return [_row_to_item(row) for row in result.fetchall()]

    async def update(
        self,
        db: AsyncSession,
        item_id: str,
        item: dict[str, Any] | None,
        source: str | None,
        official_id: str | None,
    ) -> LibraryItem | None:
        result = await db.execute(
            _UPDATE_SQL,
            {
                "item_id": item_id,
                "item": to_json_param(item),
                "item_type": item["type"] if item else None,
                "name": item["name"] if item else None,
                "source": source,
                "official_id": official_id,
            },
        )
        row = result.fetchone()
        return _row_to_item(row) if row else None

    async def delete(self, db: AsyncSession, item_id: str) -> None:
        await db.execute(_DELETE_SQL, {"item_id": item_id})

    async def get_usage(self, db: AsyncSession, item_id: str) -> ItemUsage:
        result = await db.execute(_USAGE_SQL, {"item_id": item_id})
        rows = result.fetchall()
        market_ids = sorted({as_str_id(row.market_id) for row in rows})
        return ItemUsage(
            item_id=item_id,
            shop_count=len(rows),
            in_active_market=any(row.is_active for row in rows),
            market_ids=market_ids,
        )
