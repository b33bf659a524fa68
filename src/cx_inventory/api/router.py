"""cx_inventory REST endpoints.

GET  /listings                      — marketplace listings
GET  /listings/{listing_id}         — detail
POST /listings/{listing_id}/issue   — admin issuance (grows available tons)
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.cx_common.database import get_db_session
from src.cx_common.response import ApiResponse, success_response
from src.cx_inventory.application.schemas import IssueRequest
from src.cx_inventory.application.service import InventoryApplicationService

router = APIRouter(prefix="/listings", tags=["listings"])

_service = InventoryApplicationService()


@router.get("")
async def list_listings(
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    available_only: bool = Query(False, description="Hide listings with no stock"),
) -> ApiResponse:
    data = await _service.list_listings(db, available_only)
    return success_response({"items": [item.model_dump() for item in data]}, request)


@router.get("/{listing_id}")
async def get_listing(
    listing_id: str,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_listing(db, listing_id)
    return success_response(data.model_dump(), request)


@router.post("/{listing_id}/issue")
async def issue_credits(
    listing_id: str,
    body: IssueRequest,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.issue(db, listing_id, body.amount)
    return success_response(data.model_dump(), request)
