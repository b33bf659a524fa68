"""cx_registry REST endpoints.

POST  /projects                         — owner submission
GET   /projects                         — list (filter by status / owner)
GET   /projects/{project_id}            — detail
PATCH /projects/{project_id}            — edit while under validation
POST  /projects/{project_id}/decision   — reviewer decision (exactly once)
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.cx_common.database import get_db_session
from src.cx_common.enums import ProjectStatus
from src.cx_common.response import ApiResponse, success_response
from src.cx_registry.application.schemas import (
    DecisionRequest,
    EditProjectRequest,
    SubmitProjectRequest,
)
from src.cx_registry.application.service import RegistryApplicationService

router = APIRouter(prefix="/projects", tags=["projects"])

_service = RegistryApplicationService()


@router.post("", status_code=201)
async def submit_project(
    body: SubmitProjectRequest,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.submit(db, body)
    return success_response(data.model_dump(), request)


@router.get("")
async def list_projects(
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    status: ProjectStatus | None = Query(None, description="Filter by status"),
    owner_id: str | None = Query(None, description="Filter by owner"),
) -> ApiResponse:
    data = await _service.list_projects(
        db, status.value if status else None, owner_id
    )
    return success_response({"items": [p.model_dump() for p in data]}, request)


@router.get("/{project_id}")
async def get_project(
    project_id: str,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_project(db, project_id)
    return success_response(data.model_dump(), request)


@router.patch("/{project_id}")
async def edit_project(
    project_id: str,
    body: EditProjectRequest,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.edit(db, project_id, body)
    return success_response(data.model_dump(), request)


@router.post("/{project_id}/decision")
async def decide_project(
    project_id: str,
    body: DecisionRequest,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.decide(db, project_id, body)
    return success_response(data.model_dump(), request)
