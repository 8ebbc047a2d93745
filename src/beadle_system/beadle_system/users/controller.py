from __future__ import annotations

import logging

from flask import Flask, jsonify

from ..access.guard import DEFAULT_COOKIE_NAME, invalid_request, make_guard, request_json, request_token
from ..core.exceptions import AuthenticationError, RoleNotFoundError, ValidationError
from ..container import Container

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    roles_required = make_guard(container.gate)

    def cookie_name() -> str:
        return app.config.get("TOKEN_COOKIE_NAME", DEFAULT_COOKIE_NAME)

    @app.route("/api/auth/signup", methods=["POST"], endpoint="api_signup")
    def signup():
        data = request_json()
        if data is None:
            return invalid_request()
        try:
            user_id = container.auth_service.sign_up(
                email=data.get("email", ""),
                password=data.get("password", ""),
                full_name=data.get("full_name", ""),
                form_class=data.get("form_class"),
            )
            return jsonify({"success": True, "user_id": user_id}), 201
        except ValidationError as e:
            return jsonify({"success": False, "error": str(e)}), 400
        except RoleNotFoundError as e:
            logger.error("sign up refused: %s (role catalog not seeded?)", e)
            return jsonify({"success": False, "error": "Failed to create account"}), 500
        except Exception:
            logger.exception("sign up failed")
            return jsonify({"success": False, "error": "Failed to create account"}), 500

    @app.route("/api/auth/login", methods=["POST"], endpoint="api_login")
    def login():
        data = request_json()
        if data is None:
            return invalid_request()
        try:
            result = container.auth_service.sign_in(data.get("email", ""), data.get("password", ""))
        except AuthenticationError as e:
            return jsonify({"success": False, "error": str(e)}), 401
        except Exception:
            logger.exception("login failed")
            return jsonify({"success": False, "error": "Failed to log in"}), 500

        ttl_days = int(app.config.get("SESSION_TTL_DAYS", 0) or 0)
        resp = jsonify(
            {
                "success": True,
                "token": result.token,
                "user": result.user.to_dict(),
                "roles": container.role_service.role_names_of(result.user.user_id),
            }
        )
        resp.set_cookie(
            cookie_name(),
            result.token,
            max_age=ttl_days * 86400 if ttl_days > 0 else None,
            httponly=True,
            samesite="Lax",
            secure=bool(app.config.get("SESSION_COOKIE_SECURE", False)),
        )
        return resp

    @app.route("/api/auth/logout", methods=["POST"], endpoint="api_logout")
    def logout():
        try:
            container.auth_service.sign_out(request_token())
        except Exception:
            logger.exception("logout failed")
            return jsonify({"success": False, "error": "Failed to log out"}), 500

        resp = jsonify({"success": True})
        resp.delete_cookie(cookie_name())
        return resp

    @app.route("/api/profile", methods=["GET"], endpoint="api_profile")
    @roles_required()
    def profile(current_user):
        try:
            return jsonify({"success": True, "profile": container.profile_service.get_profile(current_user.user_id)})
        except ValidationError as e:
            return jsonify({"success": False, "error": str(e)}), 404
        except Exception:
            logger.exception("profile lookup failed for user %s", current_user.user_id)
            return jsonify({"success": False, "error": "Failed to fetch profile"}), 500

    @app.route("/api/profile/update", methods=["POST"], endpoint="api_profile_update")
    @roles_required()
    def profile_update(current_user):
        data = request_json()
        if data is None:
            return invalid_request()
        try:
            container.profile_service.update_profile(
                current_user.user_id,
                full_name=data.get("full_name", ""),
                form_class=data.get("form_class"),
            )
            return jsonify({"success": True, "message": "Profile updated successfully"})
        except ValidationError as e:
            return jsonify({"success": False, "error": str(e)}), 400
        except Exception:
            logger.exception("profile update failed for user %s", current_user.user_id)
            return jsonify({"success": False, "error": "Failed to update profile"}), 500

    @app.route("/api/profile/change-password", methods=["POST"], endpoint="api_change_password")
    @roles_required()
    def change_password(current_user):
        data = request_json()
        if data is None:
            return invalid_request()
        try:
            container.profile_service.change_password(
                current_user.user_id,
                current_password=data.get("current_password", ""),
                new_password=data.get("new_password", ""),
            )
            return jsonify({"success": True, "message": "Password changed successfully"})
        except ValidationError as e:
            return jsonify({"success": False, "error": str(e)}), 400
        except Exception:
            logger.exception("password change failed for user %s", current_user.user_id)
            return jsonify({"success": False, "error": "Failed to change password"}), 500
