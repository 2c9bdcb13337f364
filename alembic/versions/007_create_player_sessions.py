"""007: create player_sessions table

Revision ID: 007
Revises: 006
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "007"
down_revision: Union[str, None] = "006"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE player_sessions (
            id              UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            market_id       UUID            NOT NULL REFERENCES markets (id),
            player_name     VARCHAR(50)     NOT NULL,
            entered_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            last_active_at  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            transactions    JSONB           NOT NULL DEFAULT '[]'::jsonb
        );
    """)
    op.execute(
        "CREATE INDEX idx_player_sessions_market ON player_sessions (market_id, last_active_at DESC);"
    )
    op.execute("COMMENT ON TABLE player_sessions IS 'DM-visible activity log, dropped on deactivation';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS player_sessions CASCADE;")
