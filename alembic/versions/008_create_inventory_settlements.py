"""008: create inventory_settlements table

Revision ID: 008
Revises: 007
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "008"
down_revision: Union[str, None] = "007"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # One row per portfolio item whose inventory decrement landed.
    op.execute("""
        CREATE TABLE inventory_settlements (
            portfolio_item_id  VARCHAR(64)  PRIMARY KEY,
            listing_id         VARCHAR(64)  NOT NULL REFERENCES credit_listings(id),
            tons               INTEGER      NOT NULL,
            settled_at         TIMESTAMPTZ  NOT NULL DEFAULT NOW()
        );
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS inventory_settlements;")
