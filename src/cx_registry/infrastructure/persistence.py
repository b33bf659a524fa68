"""ProjectRepository — concrete implementation of ProjectRepositoryProtocol.

All queries use raw text() SQL (no ORM).
Edits and decisions are conditional UPDATEs on status = 'UNDER_VALIDATION';
0 rows returned means the project is missing or already reviewed, and the
caller decides which by re-reading.

Transaction ownership: the CALLER (application service) commits or rolls back.
"""

from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.cx_common.enums import ProjectStatus
from src.cx_common.errors import InternalError
from src.cx_registry.domain.models import Project, ProjectDraft

_PROJECT_COLUMNS = """
    id, name, project_type, country, vintage_year, requested_tons,
    methodology, owner_id, status, description, website, mrv_score,
    reviewed_at, created_at, updated_at
"""

_INSERT_PROJECT_SQL = text(f"""
    INSERT INTO projects
        (id, name, project_type, country, vintage_year, requested_tons,
         methodology, owner_id, status, description, website)
    VALUES
        (:id, :name, :project_type, :country, :vintage_year, :requested_tons,
         :methodology, :owner_id, :status, :description, :website)
    RETURNING {_PROJECT_COLUMNS}
""")

_GET_PROJECT_SQL = text(f"""
    SELECT {_PROJECT_COLUMNS}
    FROM projects
    WHERE id = :project_id
""")

_LIST_PROJECTS_SQL = text(f"""
    SELECT {_PROJECT_COLUMNS}
    FROM projects
    WHERE
        (CAST(:status AS TEXT) IS NULL OR status = CAST(:status AS TEXT))
        AND (CAST(:owner_id AS TEXT) IS NULL OR owner_id = CAST(:owner_id AS TEXT))
    ORDER BY created_at DESC, id DESC
""")

# asyncpg NULL parameter pattern: untouched fields arrive as NULL and keep their
# value. The nullable columns take an explicit clear flag so they can be unset.
_UPDATE_PENDING_SQL = text(f"""
    UPDATE projects
    SET name           = COALESCE(CAST(:name AS TEXT), name),
        project_type   = COALESCE(CAST(:project_type AS TEXT), project_type),
        country        = COALESCE(CAST(:country AS TEXT), country),
        vintage_year   = COALESCE(CAST(:vintage_year AS SMALLINT), vintage_year),
        requested_tons = COALESCE(CAST(:requested_tons AS INTEGER), requested_tons),
        methodology    = COALESCE(CAST(:methodology AS TEXT), methodology),
        description    = CASE WHEN CAST(:clear_description AS BOOLEAN) THEN NULL
                              ELSE COALESCE(CAST(:description AS TEXT), description) END,
        website        = CASE WHEN CAST(:clear_website AS BOOLEAN) THEN NULL
                              ELSE COALESCE(CAST(:website AS TEXT), website) END,
        updated_at     = NOW()
    WHERE id = :project_id AND status = 'UNDER_VALIDATION'
    RETURNING {_PROJECT_COLUMNS}
""")

_DECIDE_PENDING_SQL = text(f"""
    UPDATE projects
    SET status      = :status,
        mrv_score   = :mrv_score,
        reviewed_at = NOW(),
        updated_at  = NOW()
    WHERE id = :project_id AND status = 'UNDER_VALIDATION'
    RETURNING {_PROJECT_COLUMNS}
""")

EDITABLE_FIELDS = (
    "name",
    "project_type",
    "country",
    "vintage_year",
    "requested_tons",
    "methodology",
    "description",
    "website",
)

CLEARABLE_FIELDS = ("description", "website")


def _row_to_project(row: object) -> Project:
    return Project(
        id=row.id,  # type: ignore[attr-defined]
        name=row.name,  # type: ignore[attr-defined]
        project_type=row.project_type,  # type: ignore[attr-defined]
        country=row.country,  # type: ignore[attr-defined]
        vintage_year=row.vintage_year,  # type: ignore[attr-defined]
        requested_tons=row.requested_tons,  # type: ignore[attr-defined]
        methodology=row.methodology,  # type: ignore[attr-defined]
        owner_id=row.owner_id,  # type: ignore[attr-defined]
        status=row.status,  # type: ignore[attr-defined]
        description=row.description,  # type: ignore[attr-defined]
        website=row.website,  # type: ignore[attr-defined]
        mrv_score=row.mrv_score,  # type: ignore[attr-defined]
        reviewed_at=row.reviewed_at,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


class ProjectRepository:
    """Concrete repository — state transitions are atomic at the SQL level."""

    async def create_project(
        self, db: AsyncSession, project_id: str, draft: ProjectDraft
    ) -> Project:
        result = await db.execute(
            _INSERT_PROJECT_SQL,
            {
                "id": project_id,
                "name": draft.name,
                "project_type": draft.project_type,
                "country": draft.country,
                "vintage_year": draft.vintage_year,
                "requested_tons": draft.requested_tons,
                "methodology": draft.methodology,
                "owner_id": draft.owner_id,
                "status": ProjectStatus.UNDER_VALIDATION.value,
                "description": draft.description,
                "website": draft.website,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Project insert returned no rows — this should never happen")
        return _row_to_project(row)

    async def get_project_by_id(
        self, db: AsyncSession, project_id: str
    ) -> Project | None:
        result = await db.execute(_GET_PROJECT_SQL, {"project_id": project_id})
        row = result.fetchone()
        return _row_to_project(row) if row else None

    async def list_projects(
        self,
        db: AsyncSession,
        status: str | None,
        owner_id: str | None,
    ) -> list[Project]:
        result = await db.execute(
            _LIST_PROJECTS_SQL, {"status": status, "owner_id": owner_id}
        )
        return [_row_to_project(row) for row in result.fetchall()]

    async def update_pending_project(
        self, db: AsyncSession, project_id: str, fields: dict[str, Any]
    ) -> Project | None:
        params: dict[str, Any] = {name: fields.get(name) for name in EDITABLE_FIELDS}
        for name in CLEARABLE_FIELDS:
            params[f"clear_{name}"] = name in fields and fields[name] is None
        params["project_id"] = project_id
        result = await db.execute(_UPDATE_PENDING_SQL, params)
        row = result.fetchone()
        return _row_to_project(row) if row else None

    async def decide_pending_project(
        self,
        db: AsyncSession,
        project_id: str,
        status: str,
        mrv_score: int | None,
    ) -> Project | None:
        result = await db.execute(
            _DECIDE_PENDING_SQL,
            {"project_id": project_id, "status": status, "mrv_score": mrv_score},
        )
        row = result.fetchone()
        return _row_to_project(row) if row else None
