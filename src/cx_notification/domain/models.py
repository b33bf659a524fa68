"""Domain model for cx_notification."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Notification:
    id: str
    user_id: str
    title: str
    message: str
    link: str | None
    read: bool
    created_at: datetime
