"""HoldingsApplicationService — cart, purchase saga and claims for one buyer.

Purchase runs as a saga with the portfolio as the authoritative record:

  Phase 1 (one transaction, critical): consume the cart with one DELETE ...
      RETURNING and create one portfolio item per returned line. Failure here
      fails the purchase, nothing is recorded. A concurrent checkout of the
      same cart gets no lines back and fails with EmptyCartError.
  Phase 2 (per line, advisory): atomic inventory decrement plus an
      inventory_settlements row in the same transaction.
  Phase 3 (per line, advisory): append the SOLD ledger entry.

Advisory failures are logged and returned as warnings; the buyer keeps what
they paid for and the admin reconciliation job repairs inventory and ledger
drift later.
"""

import logging
from functools import partial

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.cx_common.advisory import run_advisory
from src.cx_common.cents import cents_to_display
from src.cx_common.datetime_utils import utc_now
from src.cx_common.enums import LedgerAction
from src.cx_common.errors import (
    AppError,
    CartItemExistsError,
    CartItemNotFoundError,
    ClaimFailedError,
    EmptyCartError,
    InvalidLotQuantityError,
    ListingNotFoundError,
    PortfolioItemNotFoundError,
    PurchaseFailedError,
)
from src.cx_common.id_generator import generate_id
from src.cx_holdings.application.schemas import (
    CartOut,
    ClaimRecordOut,
    ClaimResponse,
    HoldingsSummary,
    PortfolioItemOut,
    PurchaseResponse,
)
from src.cx_holdings.domain.models import CartItem, ClaimRecord, PortfolioItem
from src.cx_holdings.domain.repository import HoldingsRepositoryProtocol
from src.cx_holdings.infrastructure.persistence import HoldingsRepository
from src.cx_inventory.domain.repository import ListingRepositoryProtocol
from src.cx_inventory.infrastructure.persistence import ListingRepository
from src.cx_ledger.application.service import LedgerApplicationService

logger = logging.getLogger(__name__)

RETIREMENT_SINK = "Retired"


def validate_lot(quantity: int, available: int, lot: int) -> None:
    """quantity must be a positive multiple of `lot` within [lot, available]."""
    if quantity < lot or quantity % lot != 0 or quantity > available:
        raise InvalidLotQuantityError(quantity, lot, available)


def default_certificate_id(buyer_id: str, item_id: str) -> str:
    return f"cert-{buyer_id[:4]}-{item_id}"


class HoldingsApplicationService:
    def __init__(
        self,
        repo: HoldingsRepositoryProtocol | None = None,
        listings: ListingRepositoryProtocol | None = None,
        ledger: LedgerApplicationService | None = None,
        lot_size: int | None = None,
    ) -> None:
        self._repo: HoldingsRepositoryProtocol = repo or HoldingsRepository()
        self._listings: ListingRepositoryProtocol = listings or ListingRepository()
        self._ledger = ledger or LedgerApplicationService()
        self._lot = lot_size or settings.MIN_LOT_TONS

    # ------------------------------------------------------------------
    # Cart
    # ------------------------------------------------------------------

    async def get_cart(self, db: AsyncSession, buyer_id: str) -> CartOut:
        items = await self._repo.get_cart(db, buyer_id)
        return CartOut.from_items(buyer_id, items)

    async def add_to_cart(
        self, db: AsyncSession, buyer_id: str, listing_id: str, quantity: int
    ) -> CartOut:
        listing = await self._listings.get_listing_by_id(db, listing_id)
        if listing is None:
            raise ListingNotFoundError(listing_id)
        validate_lot(quantity, listing.available_tons, self._lot)

        item = CartItem(
            buyer_id=buyer_id,
            listing_id=listing_id,
            quantity=quantity,
            unit_price_cents=listing.unit_price_cents,
            project_name=listing.project_name,
            vintage_year=listing.vintage_year,
        )
        try:
            added = await self._repo.add_cart_item(db, item)
            if added is None:
                raise CartItemExistsError(listing_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return await self.get_cart(db, buyer_id)

    async def remove_from_cart(
        self, db: AsyncSession, buyer_id: str, listing_id: str
    ) -> CartOut:
        try:
            if not await self._repo.delete_cart_item(db, buyer_id, listing_id):
                raise CartItemNotFoundError(listing_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return await self.get_cart(db, buyer_id)

    async def clear_cart(self, db: AsyncSession, buyer_id: str) -> CartOut:
        try:
            await self._repo.clear_cart(db, buyer_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return CartOut.from_items(buyer_id, [])

    # ------------------------------------------------------------------
    # Purchase
    # ------------------------------------------------------------------

    async def purchase(self, db: AsyncSession, buyer_id: str) -> PurchaseResponse:
        now = utc_now()
        purchased: list[tuple[CartItem, PortfolioItem]] = []
        try:
            cart = await self._repo.take_cart(db, buyer_id)
            if not cart:
                raise EmptyCartError()
            for line in cart:
                item = await self._repo.create_portfolio_item(
                    db,
                    PortfolioItem(
                        id=generate_id(),
                        buyer_id=buyer_id,
                        listing_id=line.listing_id,
                        project_name=line.project_name,
                        vintage_year=line.vintage_year,
                        tons=line.quantity,
                        purchased_at=now,
                    ),
                )
                purchased.append((line, item))
            await db.commit()
        except AppError:
            await db.rollback()
            raise
        except SQLAlchemyError as exc:
            await db.rollback()
            logger.error("Purchase for buyer %s failed: %s", buyer_id, exc)
            raise PurchaseFailedError(str(exc)) from exc

        warnings: list[str] = []
        settled = 0
        recorded = 0
        for line, item in purchased:
            inventory = await run_advisory(
                db,
                f"inventory decrement {item.listing_id} x{item.tons} for {item.id}",
                partial(self._settle_inventory, db, item),
            )
            if inventory.ok:
                settled += 1
            else:
                warnings.append(inventory.warning or "")

            ledger = await run_advisory(
                db,
                f"ledger SOLD {item.listing_id} to {buyer_id}",
                partial(
                    self._ledger.record,
                    db,
                    LedgerAction.SOLD,
                    item.listing_id,
                    line.project_name,
                    buyer_id,
                    item.tons,
                ),
            )
            if ledger.ok:
                recorded += 1
            else:
                warnings.append(ledger.warning or "")

        total = sum(line.line_cost_cents for line, _ in purchased)
        logger.info(
            "Buyer %s purchased %d line(s), %d settled, %d recorded",
            buyer_id, len(purchased), settled, recorded,
        )
        return PurchaseResponse(
            buyer_id=buyer_id,
            items=[PortfolioItemOut.from_domain(item) for _, item in purchased],
            total_cost_cents=total,
            total_cost_display=cents_to_display(total),
            inventory_settled=settled,
            ledger_recorded=recorded,
            warnings=warnings,
        )

    async def _settle_inventory(self, db: AsyncSession, item: PortfolioItem) -> None:
        await self._listings.decrement_for_sale(db, item.listing_id, item.tons)
        await self._listings.record_settlement(db, item.id, item.listing_id, item.tons)

    # ------------------------------------------------------------------
    # Claim
    # ------------------------------------------------------------------

    async def claim(
        self,
        db: AsyncSession,
        buyer_id: str,
        item_id: str,
        certificate_id: str | None = None,
    ) -> ClaimResponse:
        try:
            item = await self._repo.take_portfolio_item(db, buyer_id, item_id)
            if item is None:
                raise PortfolioItemNotFoundError(item_id)
            record = await self._repo.create_claim_record(
                db,
                ClaimRecord(
                    id=generate_id(),
                    buyer_id=buyer_id,
                    listing_id=item.listing_id,
                    portfolio_item_id=item.id,
                    project_name=item.project_name,
                    tons=item.tons,
                    claimed_at=utc_now(),
                    certificate_id=certificate_id or default_certificate_id(buyer_id, item.id),
                ),
            )
            await db.commit()
        except AppError:
            await db.rollback()
            raise
        except SQLAlchemyError as exc:
            await db.rollback()
            logger.error("Claim of %s by %s failed: %s", item_id, buyer_id, exc)
            raise ClaimFailedError(str(exc)) from exc

        warnings: list[str] = []
        ledger = await run_advisory(
            db,
            f"ledger RETIRED {record.listing_id} from {buyer_id}",
            partial(
                self._ledger.record,
                db,
                LedgerAction.RETIRED,
                record.listing_id,
                buyer_id,
                RETIREMENT_SINK,
                record.tons,
            ),
        )
        if ledger.warning:
            warnings.append(ledger.warning)

        logger.info("Buyer %s retired %d t (claim %s)", buyer_id, record.tons, record.id)
        return ClaimResponse(claim=ClaimRecordOut.from_domain(record), warnings=warnings)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def list_portfolio(
        self, db: AsyncSession, buyer_id: str
    ) -> list[PortfolioItemOut]:
        items = await self._repo.list_portfolio(db, buyer_id)
        return [PortfolioItemOut.from_domain(i) for i in items]

    async def list_claims(self, db: AsyncSession, buyer_id: str) -> list[ClaimRecordOut]:
        records = await self._repo.list_claims(db, buyer_id)
        return [ClaimRecordOut.from_domain(r) for r in records]

    async def summary(self, db: AsyncSession, buyer_id: str) -> HoldingsSummary:
        portfolio = await self._repo.list_portfolio(db, buyer_id)
        claims = await self._repo.list_claims(db, buyer_id)
        cart = await self._repo.get_cart(db, buyer_id)
        cart_total = sum(i.line_cost_cents for i in cart)
        return HoldingsSummary(
            buyer_id=buyer_id,
            credit_balance_tons=sum(i.tons for i in portfolio),
            total_offset_tons=sum(r.tons for r in claims),
            portfolio_items=len(portfolio),
            claims=len(claims),
            cart_total_cents=cart_total,
            cart_total_display=cents_to_display(cart_total),
        )
