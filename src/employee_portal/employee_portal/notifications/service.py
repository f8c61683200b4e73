from __future__ import annotations

from typing import Sequence

from ..core.constants import DEFAULT_NOTIFICATION_LIMIT
from ..core.exceptions import ActorNotFound
from ..employees.repository import EmployeeRepository
from .model import NotificationRecord
from .repository import NotificationRepository


class NotificationService:
    """Use case: a user reads their own notifications."""

    def __init__(self, notifications: NotificationRepository, employees: EmployeeRepository):
        self._notifications = notifications
        self._employees = employees

    def list_mine(
        self,
        *,
        external_id: str,
        unread_only: bool = False,
        limit: int = DEFAULT_NOTIFICATION_LIMIT,
    ) -> Sequence[NotificationRecord]:
        me = self._employees.find_by_external_id(external_id)
        if not me:
            raise ActorNotFound("User not found")
        limit = max(1, min(int(limit), 200))
        return self._notifications.list_for_recipient(
            recipient_id=me.profile_id,
            unread_only=unread_only,
            limit=limit,
        )
