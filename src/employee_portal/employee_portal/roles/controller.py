from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http_errors import current_caller_id, domain_error_response
from ..common.validators import require_int, require_json_object
from ..container import Container
from .hierarchy import dashboard_route, display_name


def register(app: Flask, container: Container) -> None:
    @app.route("/api/admin/role-management", methods=["POST"], endpoint="role_management_apply")
    def role_management_apply():
        caller = current_caller_id()
        body = require_json_object(request.get_json(silent=True))
        target_id = require_int(body.get("targetUserId"), "targetUserId")

        outcome = container.role_engine.apply_transition(
            caller,
            target_id,
            body.get("action"),
            body.get("newRole"),
        )
        if not outcome.ok:
            return domain_error_response(outcome.error)

        result = outcome.result
        if result.changed:
            message = f"Role changed to {display_name(result.new_role)}"
        else:
            message = f"Role already {display_name(result.new_role)}; nothing changed"
        return jsonify(
            {
                "success": True,
                "newRole": result.new_role.value,
                "changed": result.changed,
                "message": message,
                "dashboard": dashboard_route(result.new_role),
                "warnings": [
                    {"code": w.code, "message": w.message, "profileId": w.profile_id} for w in result.warnings
                ],
            }
        )
