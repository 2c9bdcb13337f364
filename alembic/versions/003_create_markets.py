"""003: create markets table

Revision ID: 003
Revises: 002
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # No partial unique index on (dm_id) WHERE is_active: the single active
    # market per DM is checked by the application only.
    op.execute("""
        CREATE TABLE markets (
            id              UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            dm_id           UUID            NOT NULL REFERENCES dms (id),
            name            VARCHAR(100)    NOT NULL,
            description     TEXT            NOT NULL DEFAULT '',
            access_code     VARCHAR(128)    NOT NULL,
            is_active       BOOLEAN         NOT NULL DEFAULT FALSE,
            active_until    TIMESTAMPTZ,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_markets_window CHECK (is_active OR active_until IS NULL)
        );
    """)
    op.execute("CREATE INDEX idx_markets_dm ON markets (dm_id, created_at DESC);")
    op.execute("CREATE INDEX idx_markets_access_code ON markets (access_code);")
    op.execute("""
        CREATE TRIGGER trg_markets_updated_at
            BEFORE UPDATE ON markets
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS markets CASCADE;")
