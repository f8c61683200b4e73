from __future__ import annotations

from typing import Sequence

from ..core.enums import NotificationType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import NotificationRecord
from .repository import NotificationRepository


class MySQLNotificationRepository(NotificationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, *, recipient_id: int, message: str, type: NotificationType) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO notifications(employee_id, message, type, is_read, created_at)
                VALUES(%s,%s,%s,0,UTC_TIMESTAMP())
                """,
                (int(recipient_id), message, NotificationType(type).value),
            )
            return int(cur.lastrowid)

    def list_for_recipient(
        self,
        *,
        recipient_id: int,
        unread_only: bool = False,
        limit: int = 50,
    ) -> Sequence[NotificationRecord]:
        sql = """
            SELECT id, employee_id, message, type, is_read, created_at
            FROM notifications
            WHERE employee_id=%s
        """
        params: list = [int(recipient_id)]
        if unread_only:
            sql += " AND is_read=0"
        sql += " ORDER BY created_at DESC, id DESC LIMIT %s"
        params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [
                NotificationRecord(
                    notification_id=int(r["id"]),
                    recipient_id=int(r["employee_id"]),
                    message=r["message"],
                    type=NotificationType(r["type"]),
                    read=bool(r["is_read"]),
                    created_at=r["created_at"],
                )
                for r in fetchall(cur)
            ]
