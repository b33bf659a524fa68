"""LedgerApplicationService — the only writer API for ledger_entries.

Two producers:
  - append_entry(): the public POST /ledger surface; validates, commits.
  - record(): in-process producers (registry, holdings, reconciliation);
    generates the tx hash and leaves the commit to the caller, which wraps
    it in an advisory step.
"""

import logging

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.cx_common.datetime_utils import utc_now
from src.cx_common.enums import LedgerAction
from src.cx_common.errors import AppError, InternalError, LedgerValidationError
from src.cx_common.id_generator import generate_id, generate_tx_hash
from src.cx_ledger.application.schemas import LedgerAppendRequest, LedgerEntryOut
from src.cx_ledger.domain.models import LedgerEntry
from src.cx_ledger.domain.repository import LedgerRepositoryProtocol
from src.cx_ledger.infrastructure.persistence import LedgerRepository

logger = logging.getLogger(__name__)

_VALID_ACTIONS = {a.value for a in LedgerAction}


def parse_append_body(raw: bytes) -> LedgerAppendRequest:
    """Decode a POST /ledger body; every decoding failure is a 400."""
    try:
        return LedgerAppendRequest.model_validate_json(raw or b"null")
    except PydanticValidationError as exc:
        first = exc.errors()[0]
        if first["type"] in ("json_invalid", "model_type"):
            raise LedgerValidationError("Invalid JSON body") from exc
        field = ".".join(str(part) for part in first["loc"])
        raise LedgerValidationError(f"Invalid {field}: {first['msg']}") from exc


def _validate(body: LedgerAppendRequest) -> None:
    missing = [
        wire_name
        for wire_name, value in (
            ("txHash", body.tx_hash),
            ("action", body.action),
            ("listingId", body.listing_id),
        )
        if not value
    ]
    if missing:
        raise LedgerValidationError(f"Missing required fields: {', '.join(missing)}")
    if body.action not in _VALID_ACTIONS:
        raise LedgerValidationError(
            f"Unknown action {body.action!r}; expected one of {sorted(_VALID_ACTIONS)}"
        )
    if body.amount_tons is not None and body.amount_tons < 0:
        raise LedgerValidationError(f"amountTons must be >= 0, got {body.amount_tons}")


class LedgerApplicationService:
    def __init__(self, repo: LedgerRepositoryProtocol | None = None) -> None:
        self._repo: LedgerRepositoryProtocol = repo or LedgerRepository()

    async def list_entries(self, db: AsyncSession) -> list[LedgerEntryOut]:
        entries = await self._repo.list_entries(db)
        return [LedgerEntryOut.from_domain(e) for e in entries]

    async def append_entry(
        self, db: AsyncSession, body: LedgerAppendRequest
    ) -> LedgerEntryOut:
        _validate(body)
        entry = LedgerEntry(
            id=generate_id(),
            tx_hash=body.tx_hash,  # type: ignore[arg-type]
            action=body.action,  # type: ignore[arg-type]
            listing_id=body.listing_id,  # type: ignore[arg-type]
            from_party=body.from_party,
            to_party=body.to_party,
            timestamp=body.timestamp or utc_now(),
            amount_tons=body.amount_tons,
        )
        try:
            stored = await self._repo.append(db, entry)
            await db.commit()
        except AppError:
            await db.rollback()
            raise
        except SQLAlchemyError as exc:
            await db.rollback()
            logger.error("Ledger append failed for tx %s: %s", entry.tx_hash, exc)
            raise InternalError("Ledger append failed") from exc
        return LedgerEntryOut.from_domain(stored)

    async def record(
        self,
        db: AsyncSession,
        action: LedgerAction,
        listing_id: str,
        from_party: str,
        to_party: str,
        amount_tons: int | None,
    ) -> LedgerEntry:
        entry = LedgerEntry(
            id=generate_id(),
            tx_hash=generate_tx_hash(
                action.value, listing_id, from_party, to_party, amount_tons
            ),
            action=action.value,
            listing_id=listing_id,
            from_party=from_party,
            to_party=to_party,
            timestamp=utc_now(),
            amount_tons=amount_tons,
        )
        return await self._repo.append(db, entry)
