"""007: create ledger_entries table

Revision ID: 007
Revises: 006
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "007"
down_revision: Union[str, None] = "006"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # listing_id carries no FK: public appends may reference external listings.
    op.execute("""
        CREATE TABLE ledger_entries (
            id           VARCHAR(64)  PRIMARY KEY,
            tx_hash      VARCHAR(128) NOT NULL,
            action       VARCHAR(20)  NOT NULL,
            listing_id   VARCHAR(64)  NOT NULL,
            from_party   VARCHAR(200),
            to_party     VARCHAR(200),
            timestamp    TIMESTAMPTZ  NOT NULL,
            amount_tons  INTEGER,
            created_at   TIMESTAMPTZ  NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_ledger_entries_tx_hash UNIQUE (tx_hash),
            CONSTRAINT ck_ledger_entries_action CHECK (
                action IN ('ISSUED', 'LISTED', 'SOLD', 'RETIRED', 'TRANSFERRED')
            ),
            CONSTRAINT ck_ledger_entries_amount_gte_0 CHECK (
                amount_tons IS NULL OR amount_tons >= 0
            )
        );
    """)
    op.execute("CREATE INDEX idx_ledger_entries_timestamp ON ledger_entries (timestamp DESC);")
    op.execute("CREATE INDEX idx_ledger_entries_action_to ON ledger_entries (action, to_party);")
    op.execute("""
        CREATE TRIGGER trg_ledger_entries_append_only
            BEFORE UPDATE OR DELETE ON ledger_entries
            FOR EACH ROW EXECUTE FUNCTION fn_reject_mutation();
    """)
    op.execute("COMMENT ON TABLE ledger_entries IS 'Append-only public trading ledger';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS ledger_entries;")
