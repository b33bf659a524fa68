"""Domain models for cx_registry — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime

from src.cx_common.enums import ProjectStatus


@dataclass
class Project:
    id: str
    name: str
    project_type: str
    country: str
    vintage_year: int
    requested_tons: int
    methodology: str
    owner_id: str
    status: str
    description: str | None = None
    website: str | None = None
    mrv_score: int | None = None     # set once by the reviewer
    reviewed_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_editable(self) -> bool:
        return self.status == ProjectStatus.UNDER_VALIDATION


@dataclass
class ProjectDraft:
    """Owner submission; the registry assigns id and status."""

    name: str
    project_type: str
    country: str
    vintage_year: int
    requested_tons: int
    methodology: str
    owner_id: str
    description: str | None = None
    website: str | None = None
