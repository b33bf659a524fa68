"""NotificationRepository — per-user inbox over the notifications table."""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.cx_notification.domain.models import Notification

_INSERT_SQL = text("""
    INSERT INTO notifications (id, user_id, title, message, link)
    VALUES (:id, :user_id, :title, :message, :link)
    RETURNING id, user_id, title, message, link, read, created_at
""")

_LIST_FOR_USER_SQL = text("""
    SELECT id, user_id, title, message, link, read, created_at
    FROM notifications
    WHERE user_id = :user_id
    ORDER BY created_at DESC, id DESC
    LIMIT :limit
""")


def _row_to_notification(row: object) -> Notification:
    return Notification(
        id=row.id,  # type: ignore[attr-defined]
        user_id=row.user_id,  # type: ignore[attr-defined]
        title=row.title,  # type: ignore[attr-defined]
        message=row.message,  # type: ignore[attr-defined]
        link=row.link,  # type: ignore[attr-defined]
        read=row.read,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


class NotificationRepository:
    async def create(
        self,
        db: AsyncSession,
        notification_id: str,
        user_id: str,
        title: str,
        message: str,
        link: str | None,
    ) -> Notification:
        result = await db.execute(
            _INSERT_SQL,
            {
                "id": notification_id,
                "user_id": user_id,
                "title": title,
                "message": message,
                "link": link,
            },
        )
        return _row_to_notification(result.fetchone())

    async def list_for_user(
        self, db: AsyncSession, user_id: str, limit: int
    ) -> list[Notification]:
        result = await db.execute(_LIST_FOR_USER_SQL, {"user_id": user_id, "limit": limit})
        return [_row_to_notification(row) for row in result.fetchall()]
