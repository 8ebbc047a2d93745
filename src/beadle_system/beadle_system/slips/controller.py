from __future__ import annotations

import logging

from flask import Flask, jsonify, request

from ..access.guard import invalid_request, make_guard, request_json
from ..common.datetime_utils import format_time_12h, now_local, parse_hhmm, parse_iso_date
from ..common.validators import parse_yes_no
from ..core.constants import BEADLE_ROLE
from ..core.exceptions import AuthorizationError, ValidationError
from ..container import Container
from .service import normalize_grade_level

logger = logging.getLogger(__name__)

# Roles that see every form; a plain supervisor only sees the forms they supervise.
WHOLE_SCHOOL_VIEWERS = ("staff", "admin", "tech_team")


def register(app: Flask, container: Container) -> None:
    roles_required = make_guard(container.gate)

    def allowed_forms(user_id: int, requested: str | None) -> list[str] | None:
        """None means unrestricted."""

        if container.role_service.has_any_role(user_id, WHOLE_SCHOOL_VIEWERS):
            return [normalize_grade_level(requested)] if requested else None

        forms = container.slip_service.supervisor_forms(user_id)
        if requested:
            grade = normalize_grade_level(requested)
            if grade not in forms:
                raise AuthorizationError(f"You do not supervise {grade}")
            return [grade]
        return forms

    @app.route("/api/slips", methods=["POST"], endpoint="api_submit_slip")
    @roles_required(BEADLE_ROLE)
    def submit_slip(current_user):
        data = request_json()
        if data is None:
            return invalid_request()
        try:
            slip_id = container.slip_service.submit_slip(
                current_user=current_user,
                grade_level=data.get("grade_level", ""),
                class_name=data.get("class_name", ""),
                slip_date=data.get("date", ""),
                class_start_time=data.get("class_start_time", ""),
                class_end_time_value=data.get("class_end_time", ""),
                is_double_session=data.get("is_double_session", False),
                teacher=data.get("teacher", ""),
                subject=data.get("subject", ""),
                teacher_present=data.get("teacher_present", "yes"),
                teacher_arrival_time=data.get("teacher_arrival_time", ""),
                substitute_received=data.get("substitute_received"),
                homework_given=data.get("homework_given", "no"),
                students_present=data.get("students_present", 0),
                absent_students=data.get("absent_students") or [],
                late_students=data.get("late_students") or [],
            )
            return jsonify({"success": True, "id": slip_id, "message": "Beadle slip submitted successfully"}), 201
        except ValidationError as e:
            return jsonify({"success": False, "error": str(e)}), 400
        except AuthorizationError as e:
            return jsonify({"success": False, "error": str(e)}), 403
        except Exception:
            logger.exception("slip submission failed for user %s", current_user.user_id)
            return jsonify({"success": False, "error": "Failed to submit beadle slip"}), 500

    @app.route("/api/slips/mine", methods=["GET"], endpoint="api_my_slips")
    @roles_required(BEADLE_ROLE)
    def my_slips(current_user):
        try:
            slips = container.slip_service.list_my_slips(user_id=current_user.user_id)
            return jsonify({"success": True, "slips": [s.to_dict() for s in slips]})
        except Exception:
            logger.exception("listing own slips failed for user %s", current_user.user_id)
            return jsonify({"success": False, "error": "Failed to fetch beadle slips"}), 500

    @app.route("/api/slips", methods=["GET"], endpoint="api_list_slips")
    @roles_required("staff", "supervisor", "admin", "tech_team")
    def list_slips(current_user):
        try:
            slip_date = parse_iso_date(request.args["date"]) if request.args.get("date") else None
            forms = allowed_forms(current_user.user_id, request.args.get("form"))
            search = request.args.get("search")

            if forms is None:
                slips = container.slip_service.list_slips(slip_date=slip_date, search=search)
            elif len(forms) == 1:
                slips = container.slip_service.list_slips(grade_level=forms[0], slip_date=slip_date, search=search)
            else:
                slips = container.slip_service.list_for_supervisor(
                    user_id=current_user.user_id, slip_date=slip_date, search=search
                )
            return jsonify({"success": True, "slips": [s.to_dict() for s in slips]})
        except ValidationError as e:
            return jsonify({"success": False, "error": str(e)}), 400
        except AuthorizationError as e:
            return jsonify({"success": False, "error": str(e)}), 403
        except Exception:
            logger.exception("listing slips failed")
            return jsonify({"success": False, "error": "Failed to fetch beadle slips"}), 500

    @app.route("/api/slips/reports", methods=["GET"], endpoint="api_slip_reports")
    @roles_required("supervisor", "admin")
    def reports(current_user):
        try:
            raw_date = request.args.get("date")
            report_date = parse_iso_date(raw_date) if raw_date else now_local().date()
            forms = allowed_forms(current_user.user_id, request.args.get("form"))

            built = container.slip_service.build_daily_reports(report_date, forms=forms)
            return jsonify(
                {
                    "success": True,
                    "date": report_date.isoformat(),
                    "reports": [r.to_dict() for r in built.values()],
                }
            )
        except ValidationError as e:
            return jsonify({"success": False, "error": str(e)}), 400
        except AuthorizationError as e:
            return jsonify({"success": False, "error": str(e)}), 403
        except Exception:
            logger.exception("building reports failed")
            return jsonify({"success": False, "error": "Failed to build reports"}), 500

    @app.route("/api/slips/class-end-time", methods=["GET"], endpoint="api_class_end_time")
    @roles_required()
    def end_time(current_user):
        try:
            start = parse_hhmm(request.args.get("start", ""))
            is_double = parse_yes_no(request.args.get("double", "no"), "double")
        except ValidationError as e:
            return jsonify({"success": False, "error": str(e)}), 400

        end = container.slip_service.class_end_time(start, is_double)
        return jsonify({"success": True, "end_time": end.strftime("%H:%M"), "display": format_time_12h(end)})
