"""Pydantic schemas for cx_holdings API."""

from pydantic import BaseModel, Field

from src.cx_common.cents import cents_to_display
from src.cx_holdings.domain.models import CartItem, ClaimRecord, PortfolioItem

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class AddToCartRequest(BaseModel):
    listing_id: str = Field(..., min_length=1)
    quantity: int = Field(..., gt=0, description="Tons; a multiple of the lot size")


class ClaimRequest(BaseModel):
    certificate_id: str | None = Field(
        None, max_length=128, description="Retirement certificate; derived when omitted"
    )


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class CartItemOut(BaseModel):
    listing_id: str
    project_name: str
    vintage_year: int
    quantity: int
    unit_price_cents: int
    unit_price_display: str
    line_cost_cents: int
    line_cost_display: str

    @classmethod
    def from_domain(cls, item: CartItem) -> "CartItemOut":
        return cls(
            listing_id=item.listing_id,
            project_name=item.project_name,
            vintage_year=item.vintage_year,
            quantity=item.quantity,
            unit_price_cents=item.unit_price_cents,
            unit_price_display=cents_to_display(item.unit_price_cents),
            line_cost_cents=item.line_cost_cents,
            line_cost_display=cents_to_display(item.line_cost_cents),
        )


class CartOut(BaseModel):
    buyer_id: str
    items: list[CartItemOut]
    total_cost_cents: int
    total_cost_display: str

    @classmethod
    def from_items(cls, buyer_id: str, items: list[CartItem]) -> "CartOut":
        total = sum(i.line_cost_cents for i in items)
        return cls(
            buyer_id=buyer_id,
            items=[CartItemOut.from_domain(i) for i in items],
            total_cost_cents=total,
            total_cost_display=cents_to_display(total),
        )


class PortfolioItemOut(BaseModel):
    id: str
    listing_id: str
    project_name: str
    vintage_year: int
    tons: int
    purchased_at: str

    @classmethod
    def from_domain(cls, item: PortfolioItem) -> "PortfolioItemOut":
        return cls(
            id=item.id,
            listing_id=item.listing_id,
            project_name=item.project_name,
            vintage_year=item.vintage_year,
            tons=item.tons,
            purchased_at=item.purchased_at.isoformat(),
        )


class ClaimRecordOut(BaseModel):
    id: str
    listing_id: str
    portfolio_item_id: str
    project_name: str
    tons: int
    claimed_at: str
    certificate_id: str

    @classmethod
    def from_domain(cls, record: ClaimRecord) -> "ClaimRecordOut":
        return cls(
            id=record.id,
            listing_id=record.listing_id,
            portfolio_item_id=record.portfolio_item_id,
            project_name=record.project_name,
            tons=record.tons,
            claimed_at=record.claimed_at.isoformat(),
            certificate_id=record.certificate_id,
        )


class PurchaseResponse(BaseModel):
    buyer_id: str
    items: list[PortfolioItemOut]
    total_cost_cents: int
    total_cost_display: str
    inventory_settled: int           # lines whose inventory decrement succeeded
    ledger_recorded: int             # lines whose SOLD entry was appended
    warnings: list[str] = []


class ClaimResponse(BaseModel):
    claim: ClaimRecordOut
    warnings: list[str] = []


class HoldingsSummary(BaseModel):
    buyer_id: str
    credit_balance_tons: int         # owned, not yet claimed
    total_offset_tons: int           # claimed (retired) to date
    portfolio_items: int
    claims: int
    cart_total_cents: int
    cart_total_display: str
