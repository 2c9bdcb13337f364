"""004: create shops table

Revision ID: 004
Revises: 003
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE shops (
            id              UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            market_id       UUID            NOT NULL REFERENCES markets (id),
            name            VARCHAR(100)    NOT NULL,
            category        VARCHAR(20)     NOT NULL,
            location        VARCHAR(200)    NOT NULL DEFAULT '',
            description     TEXT            NOT NULL DEFAULT '',
            shopkeeper      VARCHAR(100),
            tags            JSONB           NOT NULL DEFAULT '[]'::jsonb,
            display_order   INT             NOT NULL DEFAULT 0,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_shops_category CHECK (
                category IN ('general', 'blacksmith', 'armorer', 'fletcher',
                             'leatherworker', 'magic', 'alchemist', 'trinket',
                             'tavern', 'temple', 'market', 'toolshop', 'library',
                             'guildhall', 'inn', 'stable', 'other')
            )
        );
    """)
    op.execute("CREATE INDEX idx_shops_market ON shops (market_id, display_order);")
    op.execute("""
        CREATE TRIGGER trg_shops_updated_at
            BEFORE UPDATE ON shops
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS shops CASCADE;")
