"""Create the append-only submissions history.

Revision ID: 001
Revises:
Create Date: 2026-10-18
"""

from typing import Sequence, Union

from alembic import op


revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE IF NOT EXISTS submissions (
            id          UUID PRIMARY KEY,
            name        TEXT NOT NULL,
            region      TEXT NOT NULL,
            question    TEXT NOT NULL,
            tile_index  INT NOT NULL CHECK (tile_index >= 0),
            image_key   TEXT NOT NULL,
            image_url   TEXT NOT NULL,
            created_at  TIMESTAMPTZ NOT NULL DEFAULT now()
        );
    """)

    # Wall recovery reads the newest row per tile; exports read by created_at
    op.execute("CREATE INDEX IF NOT EXISTS idx_submissions_tile_created ON submissions(tile_index, created_at DESC);")
    op.execute("CREATE INDEX IF NOT EXISTS idx_submissions_created ON submissions(created_at);")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS submissions CASCADE;")
