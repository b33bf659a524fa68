"""Read-side aggregates for reconciliation (raw SQL across contexts)."""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.cx_admin.domain.reconciliation import Key, UnsettledPurchase

_HOLDINGS_TOTALS_SQL = text("""
    SELECT buyer_id, listing_id, SUM(tons) AS tons
    FROM (
        SELECT buyer_id, listing_id, tons FROM portfolio_items
        UNION ALL
        SELECT buyer_id, listing_id, tons FROM claim_records
    ) AS holdings
    GROUP BY buyer_id, listing_id
""")

_CLAIM_TOTALS_SQL = text("""
    SELECT buyer_id, listing_id, SUM(tons) AS tons
    FROM claim_records
    GROUP BY buyer_id, listing_id
""")

_SOLD_TOTALS_SQL = text("""
    SELECT to_party AS buyer_id, listing_id, SUM(COALESCE(amount_tons, 0)) AS tons
    FROM ledger_entries
    WHERE action = 'SOLD' AND to_party IS NOT NULL
    GROUP BY to_party, listing_id
""")

_RETIRED_TOTALS_SQL = text("""
    SELECT from_party AS buyer_id, listing_id, SUM(COALESCE(amount_tons, 0)) AS tons
    FROM ledger_entries
    WHERE action = 'RETIRED' AND from_party IS NOT NULL
    GROUP BY from_party, listing_id
""")

_UNSETTLED_SQL = text("""
    SELECT p.id AS portfolio_item_id, p.listing_id, p.tons
    FROM portfolio_items p
    LEFT JOIN inventory_settlements s ON s.portfolio_item_id = p.id
    WHERE s.portfolio_item_id IS NULL
    UNION ALL
    SELECT c.portfolio_item_id, c.listing_id, c.tons
    FROM claim_records c
    LEFT JOIN inventory_settlements s ON s.portfolio_item_id = c.portfolio_item_id
    WHERE s.portfolio_item_id IS NULL
""")

_LISTING_NAMES_SQL = text("SELECT id, project_name FROM credit_listings")


async def _totals(db: AsyncSession, sql: object) -> dict[Key, int]:
    rows = (await db.execute(sql)).fetchall()  # type: ignore[arg-type]
    return {(row.buyer_id, row.listing_id): int(row.tons) for row in rows}


class ReconciliationRepository:
    async def holdings_totals(self, db: AsyncSession) -> dict[Key, int]:
        return await _totals(db, _HOLDINGS_TOTALS_SQL)

    async def claim_totals(self, db: AsyncSession) -> dict[Key, int]:
        return await _totals(db, _CLAIM_TOTALS_SQL)

    async def sold_totals(self, db: AsyncSession) -> dict[Key, int]:
        return await _totals(db, _SOLD_TOTALS_SQL)

    async def retired_totals(self, db: AsyncSession) -> dict[Key, int]:
        return await _totals(db, _RETIRED_TOTALS_SQL)

    async def unsettled_purchases(self, db: AsyncSession) -> list[UnsettledPurchase]:
        rows = (await db.execute(_UNSETTLED_SQL)).fetchall()
        return [
            UnsettledPurchase(
                portfolio_item_id=row.portfolio_item_id,
                listing_id=row.listing_id,
                tons=row.tons,
            )
            for row in rows
        ]

    async def listing_names(self, db: AsyncSession) -> dict[str, str]:
        rows = (await db.execute(_LISTING_NAMES_SQL)).fetchall()
        return {row.id: row.project_name for row in rows}
