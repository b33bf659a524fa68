"""Best-effort steps that must never fail their parent operation.

Inventory decrements, ledger appends and notifications are advisory mirrors of
the authoritative write that precedes them. Each runs in its own transaction:
success commits, failure rolls back only that step, is logged and is handed
back to the caller as a warning string.
"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.cx_common.errors import AppError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class AdvisoryOutcome(Generic[T]):
    ok: bool
    value: T | None = None
    warning: str | None = None


async def run_advisory(
    db: AsyncSession,
    label: str,
    step: Callable[[], Awaitable[T]],
) -> AdvisoryOutcome[T]:
    try:
        value = await step()
        await db.commit()
    except (AppError, SQLAlchemyError) as exc:
        await db.rollback()
        logger.warning("Advisory step failed (%s): %s", label, exc)
        return AdvisoryOutcome(ok=False, warning=f"{label}: {exc}")
    return AdvisoryOutcome(ok=True, value=value)
