from __future__ import annotations

import json

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor
from .model import AuditEntry
from .repository import AuditRepository


class MySQLAuditRepository(AuditRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def record(self, entry: AuditEntry) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO audit_logs(actor_id, actor_role, action, resource, resource_id, details, created_at)
                VALUES(%s,%s,%s,%s,%s,%s,UTC_TIMESTAMP())
                """,
                (
                    int(entry.actor_id),
                    entry.actor_role,
                    entry.action,
                    entry.resource,
                    entry.resource_id,
                    json.dumps(entry.details, default=str),
                ),
            )
            return int(cur.lastrowid)
