from __future__ import annotations

from functools import wraps
from typing import Callable, Optional

from flask import current_app, jsonify, request

from ..core.enums import DenyReason, MatchMode
from .gate import AuthorizationGate, Decision

DEFAULT_COOKIE_NAME = "session_token"


def request_token() -> Optional[str]:
    """Session token from the cookie, falling back to a Bearer header."""

    cookie_name = current_app.config.get("TOKEN_COOKIE_NAME", DEFAULT_COOKIE_NAME)
    token = request.cookies.get(cookie_name)
    if token:
        return token

    header = request.headers.get("Authorization", "")
    if header.lower().startswith("bearer "):
        return header[7:].strip() or None
    return None


def request_json() -> Optional[dict]:
    """JSON object body; an absent or unparsable body reads as empty, any other JSON value as None."""

    data = request.get_json(silent=True)
    if data is None:
        return {}
    return data if isinstance(data, dict) else None


def invalid_request():
    return jsonify({"success": False, "error": "Invalid request data"}), 400


def deny_response(decision: Decision):
    if decision.reason == DenyReason.NOT_AUTHENTICATED:
        return jsonify({"success": False, "error": "Not authenticated"}), 401
    return (
        jsonify(
            {
                "success": False,
                "error": decision.message,
                "required_roles": list(decision.required_roles),
            }
        ),
        403,
    )


def make_guard(gate: AuthorizationGate) -> Callable:
    """Build a ``roles_required`` decorator bound to one gate.

    The wrapped view receives the resolved user as ``current_user``.
    """

    def roles_required(*required_roles: str, mode: MatchMode = MatchMode.ANY):
        def decorator(view):
            @wraps(view)
            def wrapper(*args, **kwargs):
                decision = gate.authorize(request_token(), required_roles, mode)
                if not decision.allowed:
                    return deny_response(decision)
                kwargs["current_user"] = decision.user
                return view(*args, **kwargs)

            return wrapper

        return decorator

    return roles_required
