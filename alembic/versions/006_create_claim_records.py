"""006: create claim_records table

Revision ID: 006
Revises: 005
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "006"
down_revision: Union[str, None] = "005"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # portfolio_item_id has no FK: the item row is deleted when it is claimed.
    op.execute("""
        CREATE TABLE claim_records (
            id                 VARCHAR(64)  PRIMARY KEY,
            buyer_id           VARCHAR(64)  NOT NULL,
            listing_id         VARCHAR(64)  NOT NULL REFERENCES credit_listings(id),
            portfolio_item_id  VARCHAR(64)  NOT NULL,
            project_name       VARCHAR(200) NOT NULL,
            tons               INTEGER      NOT NULL,
            claimed_at         TIMESTAMPTZ  NOT NULL DEFAULT NOW(),
            certificate_id     VARCHAR(128) NOT NULL,
            CONSTRAINT uq_claim_records_item     UNIQUE (portfolio_item_id),
            CONSTRAINT ck_claim_records_tons_gt_0 CHECK (tons > 0)
        );
    """)
    op.execute("CREATE INDEX idx_claim_records_buyer ON claim_records (buyer_id);")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS claim_records;")
