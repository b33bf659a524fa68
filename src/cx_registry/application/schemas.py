"""Pydantic schemas for cx_registry API."""

from pydantic import BaseModel, Field

from src.cx_common.datetime_utils import iso_or_none
from src.cx_common.enums import ProjectType, ReviewOutcome
from src.cx_pricing.domain.integrity import MRV_MAX, MRV_MIN
from src.cx_registry.domain.models import Project

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class SubmitProjectRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    project_type: ProjectType
    country: str = Field(..., min_length=1, max_length=100)
    vintage_year: int = Field(..., ge=1990, le=2100)
    requested_tons: int = Field(..., gt=0)
    methodology: str = Field(..., min_length=1, max_length=200)
    owner_id: str = Field(..., min_length=1, max_length=64)
    description: str | None = None
    website: str | None = Field(None, max_length=500)


class EditProjectRequest(BaseModel):
    """Partial update; omitted fields are left unchanged.

    Sending null for description or website clears it.
    """

    name: str | None = Field(None, min_length=1, max_length=200)
    project_type: ProjectType | None = None
    country: str | None = Field(None, min_length=1, max_length=100)
    vintage_year: int | None = Field(None, ge=1990, le=2100)
    requested_tons: int | None = Field(None, gt=0)
    methodology: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = None
    website: str | None = Field(None, max_length=500)


class DecisionRequest(BaseModel):
    outcome: ReviewOutcome
    mrv_score: int | None = Field(
        None,
        ge=MRV_MIN,
        le=MRV_MAX,
        description="Verifier confidence, required when outcome is VERIFIED",
    )
    corresponding_adjustment: bool = False


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class ProjectOut(BaseModel):
    id: str
    name: str
    project_type: str
    country: str
    vintage_year: int
    requested_tons: int
    methodology: str
    owner_id: str
    status: str
    description: str | None
    website: str | None
    mrv_score: int | None
    reviewed_at: str | None
    created_at: str | None
    updated_at: str | None

    @classmethod
    def from_domain(cls, p: Project) -> "ProjectOut":
        return cls(
            id=p.id,
            name=p.name,
            project_type=p.project_type,
            country=p.country,
            vintage_year=p.vintage_year,
            requested_tons=p.requested_tons,
            methodology=p.methodology,
            owner_id=p.owner_id,
            status=p.status,
            description=p.description,
            website=p.website,
            mrv_score=p.mrv_score,
            reviewed_at=iso_or_none(p.reviewed_at),
            created_at=iso_or_none(p.created_at),
            updated_at=iso_or_none(p.updated_at),
        )


class DecisionResponse(BaseModel):
    project: ProjectOut
    listing_id: str | None = None
    integrity_score: int | None = None
    unit_price_cents: int | None = None
    unit_price_display: str | None = None
    warnings: list[str] = []
