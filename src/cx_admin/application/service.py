# src/cx_admin/application/service.py
"""Reconciliation of advisory mirrors against authoritative holdings.

Detects (and, with repair=True, fixes):
  - SOLD / RETIRED ledger shortfalls, by appending compensating entries;
  - purchases whose inventory decrement never landed, by retrying the
    atomic decrement and recording the settlement.
Ledger surpluses and decrements that still fail are reported only.
"""
import logging
from functools import partial
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from src.cx_admin.domain.reconciliation import LedgerDrift, UnsettledPurchase, find_drifts
from src.cx_admin.infrastructure.persistence import ReconciliationRepository
from src.cx_common.advisory import run_advisory
from src.cx_common.enums import LedgerAction
from src.cx_holdings.application.service import RETIREMENT_SINK
from src.cx_inventory.domain.repository import ListingRepositoryProtocol
from src.cx_inventory.infrastructure.persistence import ListingRepository
from src.cx_ledger.application.service import LedgerApplicationService

logger = logging.getLogger(__name__)


class ReconciliationService:
    def __init__(
        self,
        repo: ReconciliationRepository | None = None,
        listings: ListingRepositoryProtocol | None = None,
        ledger: LedgerApplicationService | None = None,
    ) -> None:
        self._repo = repo or ReconciliationRepository()
        self._listings: ListingRepositoryProtocol = listings or ListingRepository()
        self._ledger = ledger or LedgerApplicationService()

    async def reconcile(self, db: AsyncSession, repair: bool = False) -> dict[str, Any]:
        holdings = await self._repo.holdings_totals(db)
        claims = await self._repo.claim_totals(db)
        sold = await self._repo.sold_totals(db)
        retired = await self._repo.retired_totals(db)
        unsettled = await self._repo.unsettled_purchases(db)

        drifts = find_drifts(LedgerAction.SOLD.value, holdings, sold)
        drifts += find_drifts(LedgerAction.RETIRED.value, claims, retired)
        for drift in drifts:
            logger.warning(drift.describe())
        for purchase in unsettled:
            logger.warning(
                "Unsettled purchase %s: %d t on %s",
                purchase.portfolio_item_id, purchase.tons, purchase.listing_id,
            )

        repaired_ledger = 0
        repaired_inventory = 0
        failures: list[str] = []
        if repair:
            names = await self._repo.listing_names(db)
            for drift in drifts:
                if not drift.repairable:
                    continue
                outcome = await run_advisory(
                    db, f"repair {drift.describe()}", partial(self._repair_ledger, db, drift, names)
                )
                if outcome.ok:
                    repaired_ledger += 1
                else:
                    failures.append(outcome.warning or "")
            for purchase in unsettled:
                outcome = await run_advisory(
                    db,
                    f"settle {purchase.portfolio_item_id}",
                    partial(self._settle, db, purchase),
                )
                if outcome.ok:
                    repaired_inventory += 1
                else:
                    failures.append(outcome.warning or "")

        ok = not drifts and not unsettled
        if not ok:
            logger.info(
                "Reconciliation: %d drift(s), %d unsettled, repaired ledger=%d inventory=%d",
                len(drifts), len(unsettled), repaired_ledger, repaired_inventory,
            )
        return {
            "ok": ok,
            "ledger_drifts": [_drift_out(d) for d in drifts],
            "unsettled": [_unsettled_out(u) for u in unsettled],
            "repaired_ledger": repaired_ledger,
            "repaired_inventory": repaired_inventory,
            "failures": failures,
        }

    async def _repair_ledger(
        self, db: AsyncSession, drift: LedgerDrift, names: dict[str, str]
    ) -> None:
        if drift.action == LedgerAction.SOLD:
            await self._ledger.record(
                db,
                LedgerAction.SOLD,
                drift.listing_id,
                names.get(drift.listing_id, drift.listing_id),
                drift.buyer_id,
                drift.shortfall,
            )
        else:
            await self._ledger.record(
                db,
                LedgerAction.RETIRED,
                drift.listing_id,
                drift.buyer_id,
                RETIREMENT_SINK,
                drift.shortfall,
            )

    async def _settle(self, db: AsyncSession, purchase: UnsettledPurchase) -> None:
        await self._listings.decrement_for_sale(db, purchase.listing_id, purchase.tons)
        await self._listings.record_settlement(
            db, purchase.portfolio_item_id, purchase.listing_id, purchase.tons
        )


def _drift_out(d: LedgerDrift) -> dict[str, Any]:
    return {
        "action": d.action,
        "buyer_id": d.buyer_id,
        "listing_id": d.listing_id,
        "holdings_tons": d.holdings_tons,
        "ledger_tons": d.ledger_tons,
        "shortfall_tons": d.shortfall,
        "repairable": d.repairable,
    }


def _unsettled_out(u: UnsettledPurchase) -> dict[str, Any]:
    return {
        "portfolio_item_id": u.portfolio_item_id,
        "listing_id": u.listing_id,
        "tons": u.tons,
    }
