"""cx_holdings REST endpoints, scoped to one buyer.

GET    /buyers/{buyer_id}/cart
POST   /buyers/{buyer_id}/cart                         — add one line
DELETE /buyers/{buyer_id}/cart                         — clear
DELETE /buyers/{buyer_id}/cart/{listing_id}            — remove one line
POST   /buyers/{buyer_id}/purchase                     — buy the whole cart
GET    /buyers/{buyer_id}/portfolio
POST   /buyers/{buyer_id}/portfolio/{item_id}/claim    — retire one item
GET    /buyers/{buyer_id}/claims
GET    /buyers/{buyer_id}/summary                      — balance + lifetime offset

Payment is assumed to be authorized by the caller before /purchase.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.cx_common.database import get_db_session
from src.cx_common.response import ApiResponse, success_response
from src.cx_holdings.application.schemas import AddToCartRequest, ClaimRequest
from src.cx_holdings.application.service import HoldingsApplicationService

router = APIRouter(prefix="/buyers", tags=["holdings"])

_service = HoldingsApplicationService()

DbSession = Annotated[AsyncSession, Depends(get_db_session)]


@router.get("/{buyer_id}/cart")
async def get_cart(buyer_id: str, db: DbSession, request: Request) -> ApiResponse:
    data = await _service.get_cart(db, buyer_id)
    return success_response(data.model_dump(), request)


@router.post("/{buyer_id}/cart", status_code=201)
async def add_to_cart(
    buyer_id: str, body: AddToCartRequest, db: DbSession, request: Request
) -> ApiResponse:
    data = await _service.add_to_cart(db, buyer_id, body.listing_id, body.quantity)
    return success_response(data.model_dump(), request)


@router.delete("/{buyer_id}/cart")
async def clear_cart(buyer_id: str, db: DbSession, request: Request) -> ApiResponse:
    data = await _service.clear_cart(db, buyer_id)
    return success_response(data.model_dump(), request)


@router.delete("/{buyer_id}/cart/{listing_id}")
async def remove_from_cart(
    buyer_id: str, listing_id: str, db: DbSession, request: Request
) -> ApiResponse:
    data = await _service.remove_from_cart(db, buyer_id, listing_id)
    return success_response(data.model_dump(), request)


@router.post("/{buyer_id}/purchase")
async def purchase(buyer_id: str, db: DbSession, request: Request) -> ApiResponse:
    data = await _service.purchase(db, buyer_id)
    return success_response(data.model_dump(), request)


@router.get("/{buyer_id}/portfolio")
async def list_portfolio(buyer_id: str, db: DbSession, request: Request) -> ApiResponse:
    data = await _service.list_portfolio(db, buyer_id)
    return success_response({"items": [i.model_dump() for i in data]}, request)


@router.post("/{buyer_id}/portfolio/{item_id}/claim")
async def claim(
    buyer_id: str,
    item_id: str,
    db: DbSession,
    request: Request,
    body: ClaimRequest | None = None,
) -> ApiResponse:
    certificate_id = body.certificate_id if body else None
    data = await _service.claim(db, buyer_id, item_id, certificate_id)
    return success_response(data.model_dump(), request)


@router.get("/{buyer_id}/claims")
async def list_claims(buyer_id: str, db: DbSession, request: Request) -> ApiResponse:
    data = await _service.list_claims(db, buyer_id)
    return success_response({"items": [c.model_dump() for c in data]}, request)


@router.get("/{buyer_id}/summary")
async def summary(buyer_id: str, db: DbSession, request: Request) -> ApiResponse:
    data = await _service.summary(db, buyer_id)
    return success_response(data.model_dump(), request)
