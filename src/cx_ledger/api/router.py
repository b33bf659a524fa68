"""Public trading ledger endpoints.

GET  /ledger  — every entry, newest first, as a bare JSON array
POST /ledger  — append one entry; 201 with the stored entry, 400 on any
                malformed body (bad JSON, wrong types, missing fields)

These two endpoints keep the camelCase, un-enveloped wire contract that
external auditors consume; errors still use the ApiResponse envelope.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.cx_common.database import get_db_session
from src.cx_ledger.application.schemas import LedgerAppendRequest
from src.cx_ledger.application.service import LedgerApplicationService, parse_append_body

router = APIRouter(prefix="/ledger", tags=["ledger"])

_service = LedgerApplicationService()


@router.get("")
async def list_ledger(
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> list[dict[str, Any]]:
    entries = await _service.list_entries(db)
    return [e.to_wire() for e in entries]


# The body is read raw so malformed input maps to 400, not FastAPI's 422.
@router.post(
    "",
    status_code=201,
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {
                "application/json": {
                    "schema": LedgerAppendRequest.model_json_schema(by_alias=True)
                }
            },
        }
    },
)
async def append_ledger_entry(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> dict[str, Any]:
    body = parse_append_body(await request.body())
    entry = await _service.append_entry(db, body)
    return entry.to_wire()
