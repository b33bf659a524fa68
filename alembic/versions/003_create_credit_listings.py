"""003: create credit_listings table

Revision ID: 003
Revises: 002
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE credit_listings (
            id                        VARCHAR(64)  PRIMARY KEY,
            project_id                VARCHAR(64)  NOT NULL REFERENCES projects(id),
            project_name              VARCHAR(200) NOT NULL,
            project_type              VARCHAR(30)  NOT NULL,
            country                   VARCHAR(100) NOT NULL,
            vintage_year              SMALLINT     NOT NULL,
            unit_price_cents          INTEGER      NOT NULL,
            integrity_score           SMALLINT     NOT NULL,
            additionality_score       SMALLINT     NOT NULL,
            permanence_score          SMALLINT     NOT NULL,
            mrv_score                 SMALLINT     NOT NULL,
            corresponding_adjustment  BOOLEAN      NOT NULL DEFAULT FALSE,
            available_tons            INTEGER      NOT NULL DEFAULT 0,
            created_at                TIMESTAMPTZ  NOT NULL DEFAULT NOW(),
            updated_at                TIMESTAMPTZ  NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_credit_listings_project     UNIQUE (project_id),
            CONSTRAINT ck_credit_listings_available   CHECK (available_tons >= 0),
            CONSTRAINT ck_credit_listings_price_gt_0  CHECK (unit_price_cents > 0),
            CONSTRAINT ck_credit_listings_integrity   CHECK (integrity_score BETWEEN 0 AND 100)
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_credit_listings_updated_at
            BEFORE UPDATE ON credit_listings
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute(
        "COMMENT ON TABLE credit_listings IS 'Unsold credits per verified project; prices in cents';"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS credit_listings CASCADE;")
