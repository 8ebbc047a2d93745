from __future__ import annotations

import logging

from flask import Flask, jsonify

from ..access.guard import invalid_request, make_guard, request_json
from ..core.exceptions import ValidationError
from ..container import Container

logger = logging.getLogger(__name__)

ANNOUNCEMENT_EDITORS = ("admin", "tech_team")


def register(app: Flask, container: Container) -> None:
    roles_required = make_guard(container.gate)

    @app.route("/api/announcements", methods=["GET"], endpoint="api_announcements")
    @roles_required()
    def list_announcements(current_user):
        try:
            items = container.announcement_service.list_announcements()
            return jsonify({"success": True, "announcements": [a.to_dict() for a in items]})
        except Exception:
            logger.exception("listing announcements failed")
            return jsonify({"success": False, "error": "Failed to fetch announcements"}), 500

    @app.route("/api/announcements", methods=["POST"], endpoint="api_create_announcement")
    @roles_required(*ANNOUNCEMENT_EDITORS)
    def create_announcement(current_user):
        data = request_json()
        if data is None:
            return invalid_request()
        try:
            announcement_id = container.announcement_service.create_announcement(
                title=data.get("title", ""),
                priority=data.get("priority", "low"),
                content=data.get("content", ""),
                created_by=current_user.user_id,
            )
            return jsonify({"success": True, "id": announcement_id}), 201
        except ValidationError as e:
            return jsonify({"success": False, "error": str(e)}), 400
        except Exception:
            logger.exception("creating announcement failed")
            return jsonify({"success": False, "error": "Failed to create announcement"}), 500

    @app.route("/api/announcements/<int:announcement_id>", methods=["DELETE"], endpoint="api_delete_announcement")
    @roles_required(*ANNOUNCEMENT_EDITORS)
    def delete_announcement(announcement_id: int, current_user):
        try:
            container.announcement_service.delete_announcement(announcement_id)
            return jsonify({"success": True, "message": "Announcement deleted"})
        except ValidationError as e:
            return jsonify({"success": False, "error": str(e)}), 404
        except Exception:
            logger.exception("deleting announcement %s failed", announcement_id)
            return jsonify({"success": False, "error": "Failed to delete announcement"}), 500
