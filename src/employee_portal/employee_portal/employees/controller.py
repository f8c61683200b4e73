from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http_errors import current_caller_id
from ..common.validators import require_int, require_json_object
from ..container import Container
from ..roles.hierarchy import dashboard_route, display_name
from .model import EmployeeProfile


def profile_json(p: EmployeeProfile) -> dict:
    return {
        "id": p.profile_id,
        "externalId": p.external_id,
        "name": p.name,
        "email": p.email,
        "role": p.role.value,
        "roleName": display_name(p.role),
        "position": p.position,
        "departmentId": p.department_id,
        "hireDate": p.hire_date.isoformat() if p.hire_date else None,
    }


def register(app: Flask, container: Container) -> None:
    @app.route("/api/auth/first-user-setup", methods=["GET"], endpoint="first_user_status")
    def first_user_status():
        count = container.onboarding_service.user_count()
        return jsonify({"isFirstUser": count == 0, "userCount": count})

    @app.route("/api/auth/first-user-setup", methods=["POST"], endpoint="first_user_setup")
    def first_user_setup():
        caller = current_caller_id()
        body = request.get_json(silent=True) or {}
        result = container.onboarding_service.setup_first_user(
            external_id=caller,
            name=body.get("name", ""),
            email=body.get("email", ""),
        )
        return jsonify(
            {
                "success": True,
                "role": result.profile.role.value,
                "metadataSynced": result.metadata_synced,
                "dashboard": dashboard_route(result.profile.role),
                "message": "First user setup complete - you are now the Super Administrator",
            }
        )

    @app.route("/api/auth/register-user", methods=["POST"], endpoint="register_user")
    def register_user():
        caller = current_caller_id()
        body = require_json_object(request.get_json(silent=True))
        result = container.onboarding_service.register_user(
            external_id=caller,
            selected_role=body.get("selectedRole"),
            name=body.get("name", ""),
            email=body.get("email", ""),
        )
        role = result.profile.role
        return jsonify(
            {
                "success": True,
                "role": role.value,
                "metadataSynced": result.metadata_synced,
                "dashboard": dashboard_route(role),
                "message": f"Welcome! You have been registered as {display_name(role)}.",
                "employee": profile_json(result.profile),
            }
        )

    @app.route("/api/auth/check-user-status", methods=["GET"], endpoint="check_user_status")
    def check_user_status():
        status = container.onboarding_service.status(current_caller_id())
        return jsonify(
            {
                "registered": status.registered,
                "isFirstUser": status.is_first_user,
                "role": status.role.value if status.role else None,
                "dashboard": status.dashboard,
            }
        )

    @app.route("/api/auth/sync-user-role", methods=["POST"], endpoint="sync_user_role")
    def sync_user_role():
        caller = current_caller_id()
        body = request.get_json(silent=True) or {}
        target = body.get("targetUserId")
        result = container.onboarding_service.resync_metadata(
            external_id=caller,
            target_profile_id=require_int(target, "targetUserId") if target not in (None, "") else None,
        )
        payload = {
            "success": result.metadata_synced,
            "role": result.profile.role.value,
            "metadataSynced": result.metadata_synced,
            "user": profile_json(result.profile),
        }
        if not result.metadata_synced:
            payload["code"] = "metadata_sync_failed"
            payload["error"] = "Identity provider could not be updated; try again later"
            return jsonify(payload), 503
        payload["message"] = "User role synchronized successfully"
        return jsonify(payload)

    @app.route("/api/admin/role-management", methods=["GET"], endpoint="role_management_list")
    def role_management_list():
        profiles = container.onboarding_service.list_profiles(external_id=current_caller_id())
        return jsonify({"users": [profile_json(p) for p in profiles]})
