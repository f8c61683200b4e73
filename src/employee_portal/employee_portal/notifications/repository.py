from __future__ import annotations

from typing import Protocol, Sequence

from ..core.enums import NotificationType
from .model import NotificationRecord


class NotificationRepository(Protocol):
    """Notification sink. New records are always unread."""

    def create(self, *, recipient_id: int, message: str, type: NotificationType) -> int:
        raise NotImplementedError

    def list_for_recipient(
        self,
        *,
        recipient_id: int,
        unread_only: bool = False,
        limit: int = 50,
    ) -> Sequence[NotificationRecord]:
        raise NotImplementedError
