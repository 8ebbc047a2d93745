from __future__ import annotations

import logging

from flask import Flask, jsonify, request

from ..access.guard import invalid_request, make_guard, request_json, request_token
from ..common.validators import parse_yes_no
from ..core.constants import BEADLE_ROLE
from ..core.enums import MatchMode, RoleType
from ..core.exceptions import ValidationError
from ..container import Container
from .model import RoleMutationResult

logger = logging.getLogger(__name__)

ROLE_MANAGERS = ("tech_team", "admin", "super_admin")
BEADLE_MANAGERS = ("supervisor", "staff", "admin")


def mutation_response(result: RoleMutationResult):
    if result.success:
        return jsonify(result.to_dict())
    if result.missing_role:
        return jsonify({**result.to_dict(), "missing_role": result.missing_role}), 400
    if result.error == "User not found":
        return jsonify(result.to_dict()), 404
    return jsonify(result.to_dict()), 500


def register(app: Flask, container: Container) -> None:
    roles_required = make_guard(container.gate)

    @app.route("/api/roles", methods=["GET"], endpoint="api_roles")
    @roles_required()
    def list_roles(current_user):
        role_type = (request.args.get("type") or "").strip().lower()
        try:
            if role_type:
                roles = container.role_service.list_roles_by_type(RoleType(role_type))
            else:
                roles = container.role_service.list_roles()
        except ValueError:
            return jsonify({"success": False, "error": "type must be 'primary' or 'sub'"}), 400
        return jsonify({"success": True, "roles": [r.to_dict() for r in roles]})

    @app.route("/api/access", methods=["GET"], endpoint="api_access")
    def check_access():
        required = [r.strip() for r in (request.args.get("roles") or "").split(",") if r.strip()]
        try:
            mode = MatchMode((request.args.get("mode") or MatchMode.ANY.value).strip().lower())
        except ValueError:
            return jsonify({"success": False, "error": "mode must be 'any' or 'all'"}), 400

        decision = container.gate.authorize(request_token(), required, mode)
        return jsonify({"success": True, "mode": mode.value, **decision.to_dict()})

    @app.route("/api/users/list", methods=["GET"], endpoint="api_users_list")
    @roles_required(*ROLE_MANAGERS)
    def users_list(current_user):
        try:
            return jsonify({"success": True, "users": container.role_service.list_users_with_roles()})
        except Exception:
            logger.exception("listing users failed")
            return jsonify({"success": False, "error": "Failed to fetch users"}), 500

    @app.route("/api/users/update-roles", methods=["POST"], endpoint="api_update_roles")
    @roles_required(*ROLE_MANAGERS)
    def update_roles(current_user):
        data = request_json()
        if data is None:
            return invalid_request()
        user_id = data.get("userId", data.get("user_id"))
        roles = data.get("roles")
        if user_id is None or not isinstance(roles, list):
            return invalid_request()
        try:
            user_id = int(user_id)
        except (TypeError, ValueError):
            return invalid_request()

        result = container.role_service.set_roles(user_id, [str(r) for r in roles], assigned_by=current_user.user_id)
        return mutation_response(result)

    @app.route("/api/users/<int:user_id>/roles", methods=["POST"], endpoint="api_add_role")
    @roles_required(*ROLE_MANAGERS)
    def add_role(user_id: int, current_user):
        data = request_json()
        if data is None:
            return invalid_request()
        role_name = (data.get("role") or "").strip()
        if not role_name:
            return jsonify({"success": False, "error": "role is required"}), 400
        return mutation_response(
            container.role_service.add_role(user_id, role_name, assigned_by=current_user.user_id)
        )

    @app.route("/api/users/<int:user_id>/roles/<role_name>", methods=["DELETE"], endpoint="api_remove_role")
    @roles_required(*ROLE_MANAGERS)
    def remove_role(user_id: int, role_name: str, current_user):
        return mutation_response(container.role_service.remove_role(user_id, role_name))

    @app.route("/api/users/<int:user_id>/beadle", methods=["POST"], endpoint="api_toggle_beadle")
    @roles_required(*BEADLE_MANAGERS)
    def toggle_beadle(user_id: int, current_user):
        data = request_json()
        if data is None:
            return invalid_request()
        try:
            if "enabled" in data:
                enabled = parse_yes_no(data["enabled"], "enabled")
            else:
                enabled = not container.role_service.has_role(user_id, BEADLE_ROLE)
        except ValidationError as e:
            return jsonify({"success": False, "error": str(e)}), 400

        if enabled:
            result = container.role_service.add_role(user_id, BEADLE_ROLE, assigned_by=current_user.user_id)
        else:
            result = container.role_service.remove_role(user_id, BEADLE_ROLE)
        if result.success:
            logger.info("beadle %s for user %s by %s", "granted" if enabled else "revoked", user_id, current_user.user_id)
            return jsonify({**result.to_dict(), "is_beadle": enabled})
        return mutation_response(result)
