"""005: create item_library table

Revision ID: 005
Revises: 004
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE item_library (
            id              UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            dm_id           UUID            NOT NULL REFERENCES dms (id),
            item            JSONB           NOT NULL,
            item_type       VARCHAR(20)     NOT NULL,
            name            VARCHAR(200)    NOT NULL,
            source          VARCHAR(10)     NOT NULL DEFAULT 'custom',
            official_id     VARCHAR(128),
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_item_library_source CHECK (source IN ('official', 'custom', 'modified')),
            CONSTRAINT ck_item_library_type CHECK (
                item_type IN ('gear', 'treasure', 'weapon', 'armor',
                              'consumable', 'tool', 'magic')
            )
        );
    """)
    op.execute("CREATE INDEX idx_item_library_dm ON item_library (dm_id, name);")
    op.execute("""
        CREATE TRIGGER trg_item_library_updated_at
            BEFORE UPDATE ON item_library
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS item_library CASCADE;")
