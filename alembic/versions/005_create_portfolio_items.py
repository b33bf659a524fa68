"""005: create portfolio_items table

Revision ID: 005
Revises: 004
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE portfolio_items (
            id            VARCHAR(64)  PRIMARY KEY,
            buyer_id      VARCHAR(64)  NOT NULL,
            listing_id    VARCHAR(64)  NOT NULL REFERENCES credit_listings(id),
            project_name  VARCHAR(200) NOT NULL,
            vintage_year  SMALLINT     NOT NULL,
            tons          INTEGER      NOT NULL,
            purchased_at  TIMESTAMPTZ  NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_portfolio_items_tons_gt_0 CHECK (tons > 0)
        );
    """)
    op.execute("CREATE INDEX idx_portfolio_items_buyer ON portfolio_items (buyer_id);")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS portfolio_items;")
