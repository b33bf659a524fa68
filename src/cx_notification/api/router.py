"""Notification inbox (read-only)."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.cx_common.database import get_db_session
from src.cx_common.response import ApiResponse, success_response
from src.cx_notification.application.service import NotificationService

router = APIRouter(prefix="/users", tags=["notifications"])
_service = NotificationService()


@router.get("/{user_id}/notifications")
async def list_notifications(
    user_id: str,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    limit: int = Query(50, ge=1, le=200),
) -> ApiResponse:
    data = await _service.list_for_user(db, user_id, limit)
    return success_response({"items": data}, request)
