# src/cx_admin/api/router.py
"""Admin REST API."""
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.cx_admin.application.service import ReconciliationService
from src.cx_common.database import get_db_session
from src.cx_common.response import ApiResponse, success_response

router = APIRouter(prefix="/admin", tags=["admin"])
_service = ReconciliationService()


@router.get("/reconciliation")
async def reconciliation_report(
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    result = await _service.reconcile(db, repair=False)
    return success_response(result, request)


@router.post("/reconciliation")
async def reconcile(
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    result = await _service.reconcile(db, repair=True)
    return success_response(result, request)
