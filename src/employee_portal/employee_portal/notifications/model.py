from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from ..core.enums import NotificationType


@dataclass(frozen=True)
class NotificationRecord:
    notification_id: int
    recipient_id: int
    message: str
    type: NotificationType
    read: bool
    created_at: datetime
