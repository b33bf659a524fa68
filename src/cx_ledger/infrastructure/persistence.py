"""LedgerRepository — append-only store over the ledger_entries table.

Only INSERT and SELECT statements live here. A database trigger additionally
rejects UPDATE/DELETE (see migration 007).
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.cx_common.errors import DuplicateTxHashError
from src.cx_ledger.domain.models import LedgerEntry

_INSERT_ENTRY_SQL = text("""
    INSERT INTO ledger_entries
        (id, tx_hash, action, listing_id, from_party, to_party, timestamp, amount_tons)
    VALUES
        (:id, :tx_hash, :action, :listing_id, :from_party, :to_party, :timestamp, :amount_tons)
    ON CONFLICT (tx_hash) DO NOTHING
    RETURNING id, tx_hash, action, listing_id, from_party, to_party, timestamp, amount_tons
""")

_LIST_ENTRIES_SQL = text("""
    SELECT id, tx_hash, action, listing_id, from_party, to_party, timestamp, amount_tons
    FROM ledger_entries
    ORDER BY timestamp DESC, id DESC
""")


def _row_to_entry(row: object) -> LedgerEntry:
    return LedgerEntry(
        id=row.id,  # type: ignore[attr-defined]
        tx_hash=row.tx_hash,  # type: ignore[attr-defined]
        action=row.action,  # type: ignore[attr-defined]
        listing_id=row.listing_id,  # type: ignore[attr-defined]
        from_party=row.from_party,  # type: ignore[attr-defined]
        to_party=row.to_party,  # type: ignore[attr-defined]
        timestamp=row.timestamp,  # type: ignore[attr-defined]
        amount_tons=row.amount_tons,  # type: ignore[attr-defined]
    )


class LedgerRepository:
    async def append(self, db: AsyncSession, entry: LedgerEntry) -> LedgerEntry:
        result = await db.execute(
            _INSERT_ENTRY_SQL,
            {
                "id": entry.id,
                "tx_hash": entry.tx_hash,
                "action": entry.action,
                "listing_id": entry.listing_id,
                "from_party": entry.from_party,
                "to_party": entry.to_party,
                "timestamp": entry.timestamp,
                "amount_tons": entry.amount_tons,
            },
        )
        row = result.fetchone()
        if row is None:
            raise DuplicateTxHashError(entry.tx_hash)
        return _row_to_entry(row)

    async def list_entries(self, db: AsyncSession) -> list[LedgerEntry]:
        result = await db.execute(_LIST_ENTRIES_SQL)
        return [_row_to_entry(row) for row in result.fetchall()]
