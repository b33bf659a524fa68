"""Pydantic schemas for cx_inventory API."""

from pydantic import BaseModel, Field

from src.cx_common.cents import cents_to_display
from src.cx_common.datetime_utils import iso_or_none
from src.cx_inventory.domain.models import CreditListing


class IssueRequest(BaseModel):
    amount: int = Field(..., gt=0, description="Tons (tCO2e) to add to available inventory")


class ListingOut(BaseModel):
    id: str
    project_id: str
    project_name: str
    project_type: str
    country: str
    vintage_year: int
    unit_price_cents: int
    unit_price_display: str
    integrity_score: int
    additionality_score: int
    permanence_score: int
    mrv_score: int
    corresponding_adjustment: bool
    available_tons: int
    created_at: str | None
    updated_at: str | None

    @classmethod
    def from_domain(cls, listing: CreditListing) -> "ListingOut":
        return cls(
            id=listing.id,
            project_id=listing.project_id,
            project_name=listing.project_name,
            project_type=listing.project_type,
            country=listing.country,
            vintage_year=listing.vintage_year,
            unit_price_cents=listing.unit_price_cents,
            unit_price_display=cents_to_display(listing.unit_price_cents),
            integrity_score=listing.integrity_score,
            additionality_score=listing.additionality_score,
            permanence_score=listing.permanence_score,
            mrv_score=listing.mrv_score,
            corresponding_adjustment=listing.corresponding_adjustment,
            available_tons=listing.available_tons,
            created_at=iso_or_none(listing.created_at),
            updated_at=iso_or_none(listing.updated_at),
        )


class IssueResponse(BaseModel):
    listing: ListingOut
    issued_tons: int
    warnings: list[str] = []
