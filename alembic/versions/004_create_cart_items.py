"""004: create cart_items table

Revision ID: 004
Revises: 003
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE cart_items (
            buyer_id          VARCHAR(64)  NOT NULL,
            listing_id        VARCHAR(64)  NOT NULL REFERENCES credit_listings(id),
            quantity          INTEGER      NOT NULL,
            unit_price_cents  INTEGER      NOT NULL,
            project_name      VARCHAR(200) NOT NULL,
            vintage_year      SMALLINT     NOT NULL,
            created_at        TIMESTAMPTZ  NOT NULL DEFAULT NOW(),
            PRIMARY KEY (buyer_id, listing_id),
            CONSTRAINT ck_cart_items_quantity_gt_0 CHECK (quantity > 0)
        );
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS cart_items;")
