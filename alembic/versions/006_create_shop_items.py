"""006: create shop_items table

Revision ID: 006
Revises: 005
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "006"
down_revision: Union[str, None] = "005"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE shop_items (
            id              UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            shop_id         UUID            NOT NULL REFERENCES shops (id),
            market_id       UUID            NOT NULL REFERENCES markets (id),
            item_library_id UUID            NOT NULL REFERENCES item_library (id),
            price_gp        INT             NOT NULL DEFAULT 0,
            price_sp        INT             NOT NULL DEFAULT 0,
            price_cp        INT             NOT NULL DEFAULT 0,
            stock           INT,
            original_stock  INT,
            item_snapshot   JSONB           NOT NULL,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_shop_items_price_gte_0 CHECK (price_gp >= 0 AND price_sp >= 0 AND price_cp >= 0),
            CONSTRAINT ck_shop_items_price_positive CHECK (price_gp + price_sp + price_cp > 0),
            CONSTRAINT ck_shop_items_stock_gte_0 CHECK (stock IS NULL OR stock >= 0),
            CONSTRAINT ck_shop_items_original_stock_gte_0 CHECK (original_stock IS NULL OR original_stock >= 0)
        );
    """)
    op.execute("CREATE INDEX idx_shop_items_shop ON shop_items (shop_id, created_at DESC);")
    op.execute("CREATE INDEX idx_shop_items_market ON shop_items (market_id);")
    op.execute("CREATE INDEX idx_shop_items_library ON shop_items (item_library_id);")
    op.execute("""
        CREATE TRIGGER trg_shop_items_updated_at
            BEFORE UPDATE ON shop_items
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute(
        "COMMENT ON COLUMN shop_items.stock IS 'NULL = unlimited; restored from original_stock on deactivation';"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS shop_items CASCADE;")
