"""Domain models for cx_ledger — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class LedgerEntry:
    id: str                          # snowflake, assigned server-side
    tx_hash: str                     # UNIQUE
    action: str                      # LedgerAction value
    listing_id: str
    from_party: str | None
    to_party: str | None
    timestamp: datetime
    amount_tons: int | None = None
    # NOTE: frozen and no updated_at, ledger_entries is append-only
