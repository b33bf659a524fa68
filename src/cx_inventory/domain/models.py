"""Domain models for cx_inventory — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class CreditListing:
    id: str                          # == project_id
    project_id: str
    project_name: str
    project_type: str
    country: str
    vintage_year: int
    unit_price_cents: int
    integrity_score: int
    additionality_score: int
    permanence_score: int
    mrv_score: int
    corresponding_adjustment: bool   # compliance flag recorded at review time
    available_tons: int = 0          # never negative
    created_at: datetime | None = None
    updated_at: datetime | None = None
