"""Notification sink.

notify() is fire-and-forget from the caller's point of view: it runs as an
advisory step and returns a warning string instead of raising.
"""

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from src.cx_common.advisory import run_advisory
from src.cx_common.datetime_utils import iso_or_none
from src.cx_common.id_generator import generate_id
from src.cx_notification.infrastructure.persistence import NotificationRepository


class NotificationService:
    def __init__(self, repo: NotificationRepository | None = None) -> None:
        self._repo = repo or NotificationRepository()

    async def notify(
        self,
        db: AsyncSession,
        user_id: str,
        title: str,
        message: str,
        link: str | None = None,
    ) -> str | None:
        outcome = await run_advisory(
            db,
            f"notify {user_id}",
            lambda: self._repo.create(db, generate_id(), user_id, title, message, link),
        )
        return outcome.warning

    async def list_for_user(
        self, db: AsyncSession, user_id: str, limit: int
    ) -> list[dict[str, Any]]:
        items = await self._repo.list_for_user(db, user_id, limit)
        return [
            {
                "id": n.id,
                "title": n.title,
                "message": n.message,
                "link": n.link,
                "read": n.read,
                "created_at": iso_or_none(n.created_at),
            }
            for n in items
        ]
