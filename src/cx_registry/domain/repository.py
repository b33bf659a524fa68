"""Repository Protocol — dependency inversion for testability.

Unit tests inject a mock that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from typing import Any, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.cx_registry.domain.models import Project, ProjectDraft


class ProjectRepositoryProtocol(Protocol):
    async def create_project(
        self, db: AsyncSession, project_id: str, draft: ProjectDraft
    ) -> Project: ...

    async def get_project_by_id(
        self, db: AsyncSession, project_id: str
    ) -> Project | None: ...

    async def list_projects(
        self,
        db: AsyncSession,
        status: str | None,
        owner_id: str | None,
    ) -> list[Project]: ...

    async def update_pending_project(
        self, db: AsyncSession, project_id: str, fields: dict[str, Any]
    ) -> Project | None:
        """Apply `fields` only while UNDER_VALIDATION; None when no row matched.

        A None value for description or website sets the column to NULL.
        """
        ...

    async def decide_pending_project(
        self,
        db: AsyncSession,
        project_id: str,
        status: str,
        mrv_score: int | None,
    ) -> Project | None:
        """Move UNDER_VALIDATION -> status exactly once; None when no row matched."""
        ...
