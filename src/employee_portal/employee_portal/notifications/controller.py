from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http_errors import current_caller_id
from ..common.validators import require_int
from ..container import Container
from ..core.constants import DEFAULT_NOTIFICATION_LIMIT


def register(app: Flask, container: Container) -> None:
    @app.route("/api/notifications", methods=["GET"], endpoint="my_notifications")
    def my_notifications():
        unread_only = request.args.get("unread", "").lower() in {"1", "true", "yes"}
        limit = require_int(request.args.get("limit", DEFAULT_NOTIFICATION_LIMIT), "limit")
        items = container.notification_service.list_mine(
            external_id=current_caller_id(),
            unread_only=unread_only,
            limit=limit,
        )
        return jsonify(
            {
                "notifications": [
                    {
                        "id": n.notification_id,
                        "message": n.message,
                        "type": n.type.value,
                        "read": n.read,
                        "createdAt": n.created_at.isoformat() if n.created_at else None,
                    }
                    for n in items
                ]
            }
        )
