"""Domain models for cx_holdings — pure dataclasses, no SQLAlchemy dependency.

Lifecycle of a ton of credit from a buyer's point of view:
    CartItem --purchase--> PortfolioItem --claim--> ClaimRecord
Each arrow consumes its source row in the same transaction that creates the
target row.
"""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class CartItem:
    buyer_id: str
    listing_id: str
    quantity: int                    # tons, multiple of the lot size
    unit_price_cents: int            # snapshot at add time
    project_name: str
    vintage_year: int
    created_at: datetime | None = None

    @property
    def line_cost_cents(self) -> int:
        return self.quantity * self.unit_price_cents


@dataclass
class PortfolioItem:
    id: str
    buyer_id: str
    listing_id: str
    project_name: str
    vintage_year: int
    tons: int
    purchased_at: datetime


@dataclass(frozen=True)
class ClaimRecord:
    id: str
    buyer_id: str
    listing_id: str
    portfolio_item_id: str           # UNIQUE: one claim per portfolio item
    project_name: str
    tons: int
    claimed_at: datetime
    certificate_id: str
