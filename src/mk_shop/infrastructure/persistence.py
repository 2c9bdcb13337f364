"""ShopRepository / ShopItemRepository — raw text() SQL implementations.

Transaction ownership: the CALLER (application service) commits or rolls
back. Bulk deletes return the number of rows removed.
"""

from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.mk_common.currency import Currency
from src.mk_common.rows import as_json, as_str_id, to_json_param
from src.mk_shop.domain.models import Shop, ShopItem

# ---------------------------------------------------------------------------
# SQL: shops
# ---------------------------------------------------------------------------

_SHOP_COLUMNS = """
    id, market_id, name, category, location, description, shopkeeper,
    tags, display_order, created_at, updated_at
"""

_COUNT_SHOPS_SQL = text("SELECT COUNT(*) AS n FROM shops WHERE market_id = :market_id")

_INSERT_SHOP_SQL = text(f"""
    INSERT INTO shops
        (market_id, name, category, location, description, shopkeeper, tags, display_order)
    VALUES
        (:market_id, :name, :category, :location, :description, :shopkeeper,
         CAST(:tags AS JSONB), :display_order)
    RETURNING {_SHOP_COLUMNS}
""")

_GET_SHOP_SQL = text(f"SELECT {_SHOP_COLUMNS} FROM shops WHERE id = :shop_id")

_LIST_SHOPS_SQL = text(f"""
    SELECT {_SHOP_COLUMNS}
    FROM shops
    WHERE market_id = :market_id
    ORDER BY display_order ASC, created_at ASC
""")

_UPDATE_SHOP_SQL = text(f"""
    UPDATE shops
    SET name        = COALESCE(CAST(:name AS TEXT), name),
        category    = COALESCE(CAST(:category AS TEXT), category),
        location    = COALESCE(CAST(:location AS TEXT), location),
        description = COALESCE(CAST(:description AS TEXT), description),
        shopkeeper  = COALESCE(CAST(:shopkeeper AS TEXT), shopkeeper),
        tags        = COALESCE(CAST(:tags AS JSONB), tags),
        updated_at  = NOW()
    WHERE id = :shop_id
    RETURNING {_SHOP_COLUMNS}
""")

_SET_SHOP_ORDER_SQL = text("""
    UPDATE shops SET display_order = :display_order, updated_at = NOW()
    WHERE id = :shop_id
""")

_DELETE_SHOP_SQL = text("DELETE FROM shops WHERE id = :shop_id")

_DELETE_SHOPS_BY_MARKET_SQL = text("DELETE FROM shops WHERE market_id = :market_id")

# ---------------------------------------------------------------------------
# SQL: shop items
# ---------------------------------------------------------------------------

_ITEM_COLUMNS = """
    id, shop_id, market_id, item_library_id,
    price_gp, price_sp, price_cp, stock, original_stock,
    item_snapshot, created_at, updated_at
"""

_COUNT_ITEMS_SQL = text("SELECT COUNT(*) AS n FROM shop_items WHERE shop_id = :shop_id")

# original_stock starts equal to stock: the baseline a session resets to
_INSERT_ITEM_SQL = text(f"""
    INSERT INTO shop_items
        (shop_id, market_id, item_library_id, price_gp, price_sp, price_cp,
         stock, original_stock, item_snapshot)
    VALUES
        (:shop_id, :market_id, :item_library_id, :gp, :sp, :cp,
         :stock, :stock, CAST(:item_snapshot AS JSONB))
    RETURNING {_ITEM_COLUMNS}
""")

_GET_ITEM_SQL = text(f"SELECT {_ITEM_COLUMNS} FROM shop_items WHERE id = :shop_item_id")

_LIST_ITEMS_BY_SHOP_SQL = text(f"""
    SELECT {_ITEM_COLUMNS} FROM shop_items
    WHERE shop_id = :shop_id
    ORDER BY created_at DESC, id DESC
""")

_LIST_ITEMS_BY_MARKET_SQL = text(f"""
    SELECT {_ITEM_COLUMNS} FROM shop_items
    WHERE market_id = :market_id
    ORDER BY created_at DESC, id DESC
""")

_UPDATE_PRICE_SQL = text("""
    UPDATE shop_items
    SET price_gp = :gp, price_sp = :sp, price_cp = :cp, updated_at = NOW()
    WHERE id = :shop_item_id
""")

# A DM edit to stock is a new baseline, so original_stock moves with it
_UPDATE_STOCK_SQL = text("""
    UPDATE shop_items
    SET stock = :stock, original_stock = :stock, updated_at = NOW()
    WHERE id = :shop_item_id
""")

_UPDATE_SNAPSHOT_SQL = text("""
    UPDATE shop_items
    SET item_snapshot = CAST(:item_snapshot AS JSONB), updated_at = NOW()
    WHERE id = :shop_item_id
""")

_DELETE_ITEM_SQL = text("DELETE FROM shop_items WHERE id = :shop_item_id")

_DELETE_ITEMS_BY_SHOP_SQL = text("DELETE FROM shop_items WHERE shop_id = :shop_id")

_DELETE_ITEMS_BY_MARKET_SQL = text("DELETE FROM shop_items WHERE market_id = :market_id")

_DELETE_ITEMS_BY_LIBRARY_SQL = text(
    "DELETE FROM shop_items WHERE item_library_id = :item_library_id"
)

_RESTORE_STOCK_SQL = text("""
    UPDATE shop_items
    SET stock = original_stock, updated_at = NOW()
    WHERE market_id = :market_id
""")

# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _row_to_shop(row: Any) -> Shop:
    return Shop(
        id=as_str_id(row.id),
        market_id=as_str_id(row.market_id),
        name=row.name,
        category=row.category,
        location=row.location,
        description=row.description,
        shopkeeper=row.shopkeeper,
        tags=as_json(row.tags) or [],
        display_order=row.display_order,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _row_to_item(row: Any) -> ShopItem:
    return ShopItem(
        id=as_str_id(row.id),
        shop_id=as_str_id(row.shop_id),
        market_id=as_str_id(row.market_id),
        item_library_id=as_str_id(row.item_library_id),
        price=Currency(gp=row.price_gp, sp=row.price_sp, cp=row.price_cp),
        stock=row.stock,
        original_stock=row.original_stock,
        item_snapshot=as_json(row.item_snapshot) or {},
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


# ---------------------------------------------------------------------------
# Repositories
# ---------------------------------------------------------------------------


class ShopRepository:
    async def count_by_market(self, db: AsyncSession, market_id: str) -> int:
        result = await db.execute(_COUNT_SHOPS_SQL, {"market_id": market_id})
        return int(result.scalar_one())

    async def create(
        self, db: AsyncSession, market_id: str, fields: dict[str, Any], display_order: int
    ) -> Shop:
        result = await db.execute(
            _INSERT_SHOP_SQL,
            {
                "market_id": market_id,
                "name": fields["name"],
                "category": fields["category"],
                "location": fields.get("location", ""),
                "description": fields.get("description", ""),
                "shopkeeper": fields.get("shopkeeper"),
                "tags": to_json_param(fields.get("tags") or []),
                "display_order": display_order,
            },
        )
        return _row_to_shop(result.fetchone())

    async def get_by_id(self, db: AsyncSession, shop_id: str) -> Shop | None:
        result = await db.execute(_GET_SHOP_SQL, {"shop_id": shop_id})
        row = result.fetchone()
        return _row_to_shop(row) if row else None

    async def list_by_market(self, db: AsyncSession, market_id: str) -> list[Shop]:
        result = await db.execute(_LIST_SHOPS_SQL, {"market_id": market_id})
        return [_row_to_shop(row) for row in result.fetchall()]

    async def update(
        self, db: AsyncSession, shop_id: str, fields: dict[str, Any]
    ) -> Shop | None:
        tags = fields.get("tags")
        result = await db.execute(
            _UPDATE_SHOP_SQL,
            {
                "shop_id": shop_id,
                "name": fields.get("name"),
                "category": fields.get("category"),
                "location": fields.get("location"),
                "description": fields.get("description"),
                "shopkeeper": fields.get("shopkeeper"),
                "tags": to_json_param(tags) if tags is not None else None,
            },
        )
        row = result.fetchone()
        return _row_to_shop(row) if row else None

    async def set_order(self, db: AsyncSession, shop_id: str, display_order: int) -> None:
        await db.execute(
            _SET_SHOP_ORDER_SQL, {"shop_id": shop_id, "display_order": display_order}
        )

    async def delete(self, db: AsyncSession, shop_id: str) -> None:
        await db.execute(_DELETE_SHOP_SQL, {"shop_id": shop_id})

    async def delete_by_market(self, db: AsyncSession, market_id: str) -> int:
        result = await db.execute(_DELETE_SHOPS_BY_MARKET_SQL, {"market_id": market_id})
        return result.rowcount or 0


class ShopItemRepository:
    async def count_by_shop(self, db: AsyncSession, shop_id: str) -> int:
        result = await db.execute(_COUNT_ITEMS_SQL, {"shop_id": shop_id})
        return int(result.scalar_one())

    async def create(
        self,
        db: AsyncSession,
        shop_id: str,
        market_id: str,
        item_library_id: str,
        price: Currency,
        stock: int | None,
        item_snapshot: dict[str, Any],
    ) -> ShopItem:
        result = await db.execute(
            _INSERT_ITEM_SQL,
            {
                "shop_id": shop_id,
                "market_id": market_id,
                "item_library_id": item_library_id,
                "gp": price.gp,
                "sp": price.sp,
                "cp": price.cp,
                "stock": stock,
                "item_snapshot": to_json_param(item_snapshot),
            },
        )
        return _row_to_item(result.fetchone())

    async def get_by_id(self, db: AsyncSession, shop_item_id: str) -> ShopItem | None:
        result = await db.execute(_GET_ITEM_SQL, {"shop_item_id": shop_item_id})
        row = result.fetchone()
        return _row_to_item(row) if row else None

    async def list_by_shop(self, db: AsyncSession, shop_id: str) -> list[ShopItem]:
        result = await db.execute(_LIST_ITEMS_BY_SHOP_SQL, {"shop_id": shop_id})
        return [_row_to_item(row) for row in result.fetchall()]

    async def list_by_market(self, db: AsyncSession, market_id: str) -> list[ShopItem]:
        result = await db.execute(_LIST_ITEMS_BY_MARKET_SQL, {"market_id": market_id})
        return [_row_to_item(row) for row in result.fetchall()]

    async def update_price(
        self, db: AsyncSession, shop_item_id: str, price: Currency
    ) -> None:
        await db.execute(
            _UPDATE_PRICE_SQL,
            {"shop_item_id": shop_item_id, "gp": price.gp, "sp": price.sp, "cp": price.cp},
        )

    async def update_stock(
        self, db: AsyncSession, shop_item_id: str, stock: int | None
    ) -> None:
        await db.execute(_UPDATE_STOCK_SQL, {"shop_item_id": shop_item_id, "stock": stock})

    async def update_snapshot(
        self, db: AsyncSession, shop_item_id: str, item_snapshot: dict[str, Any]
    ) -> None:
        await db.execute(
            _UPDATE_SNAPSHOT_SQL,
            {"shop_item_id": shop_item_id, "item_snapshot": to_json_param(item_snapshot)},
        )

    async def delete(self, db: AsyncSession, shop_item_id: str) -> None:
        await db.execute(_DELETE_ITEM_SQL, {"shop_item_id": shop_item_id})

    async def delete_by_shop(self, db: AsyncSession, shop_id: str) -> int:
        result = await db.execute(_DELETE_ITEMS_BY_SHOP_SQL, {"shop_id": shop_id})
        return result.rowcount or 0

    async def delete_by_market(self, db: AsyncSession, market_id: str) -> int:
        result = await db.execute(_DELETE_ITEMS_BY_MARKET_SQL, {"market_id": market_id})
        return result.rowcount or 0

    async def delete_by_library_item(self, db: AsyncSession, item_library_id: str) -> int:
        result = await db.execute(
            _DELETE_ITEMS_BY_LIBRARY_SQL, {"item_library_id": item_library_id}
        )
        return result.rowcount or 0

    async def restore_original_stock(self, db: AsyncSession, market_id: str) -> int:
        result = await db.execute(_RESTORE_STOCK_SQL, {"market_id": market_id})
        return result.rowcount or 0
