from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta
from typing import Iterable, Optional

from ..common.datetime_utils import parse_hhmm, parse_iso_date
from ..common.validators import parse_yes_no, require_non_empty
from ..core.constants import (
    BEADLE_ROLE,
    DEFAULT_LIST_LIMIT,
    DOUBLE_SESSION_MINUTES,
    FORM_LEVELS,
    SINGLE_SESSION_MINUTES,
    SIXTH_FORM_LEVELS,
    SUPERVISOR_ROLE_BY_FORM,
)
from ..core.exceptions import AuthorizationError, ValidationError
from ..roles.service import RoleService
from ..sessions.model import SessionUser
from .model import BeadleSlip, ClassReport, FormReport, NewBeadleSlip, StudentClassRecord
from .repository import SlipRepository

logger = logging.getLogger(__name__)


def class_end_time(start: time, is_double_session: bool) -> time:
    """Single sessions last 35 minutes, double sessions 70."""

    minutes = DOUBLE_SESSION_MINUTES if is_double_session else SINGLE_SESSION_MINUTES
    return (datetime.combine(date.min, start) + timedelta(minutes=minutes)).time()


def normalize_grade_level(value: str) -> str:
    """Accept '5th Form', '5th', '5', '6a' ... and return the canonical label."""

    v = (value or "").strip().lower()
    if v == "6":
        return "6B"
    for form in FORM_LEVELS:
        short = form.replace(" Form", "")
        aliases = {form.lower(), short.lower()}
        if form not in SIXTH_FORM_LEVELS:
            aliases.add("".join(ch for ch in form if ch.isdigit()))
        if v in aliases:
            return form
    raise ValidationError("Unknown form level")


def validate_class_name(grade_level: str, class_name: str) -> str:
    class_name = require_non_empty(class_name, "Form class").upper()
    if grade_level in SIXTH_FORM_LEVELS:
        return class_name

    form_number = "".join(ch for ch in grade_level if ch.isdigit())
    if form_number and not class_name.startswith(form_number):
        raise ValidationError(f"Form class must start with {form_number} for {grade_level} students")
    return class_name


def _clean_names(names: Optional[Iterable[str]]) -> tuple[str, ...]:
    return tuple(n.strip() for n in (names or []) if n and n.strip())


def _search(slips: Iterable[BeadleSlip], search: Optional[str]) -> list[BeadleSlip]:
    term = (search or "").strip().lower()
    if not term:
        return list(slips)
    return [
        s
        for s in slips
        if term in s.teacher.lower() or term in s.subject.lower() or term in s.class_name.lower()
    ]


def _optional_time(value: Optional[str]) -> Optional[time]:
    v = (value or "").strip()
    return parse_hhmm(v) if v else None


class SlipService:
    """Use cases: submit beadle slips, review them, summarise a form's day."""

    def __init__(self, slips: SlipRepository, roles: RoleService, *, school_email_domain: str = "campioncollege.com"):
        self._slips = slips
        self._roles = roles
        self._school_email_domain = school_email_domain

    class_end_time = staticmethod(class_end_time)

    def submit_slip(
        self,
        *,
        current_user: SessionUser,
        grade_level: str,
        class_name: str,
        slip_date: str,
        class_start_time: str,
        class_end_time_value: str = "",
        is_double_session=False,
        teacher: str,
        subject: str,
        teacher_present="yes",
        teacher_arrival_time: str = "",
        substitute_received=None,
        homework_given="no",
        students_present=0,
        absent_students: Optional[Iterable[str]] = None,
        late_students: Optional[Iterable[str]] = None,
    ) -> int:
        if not self._roles.has_role(current_user.user_id, BEADLE_ROLE):
            raise AuthorizationError(
                "You are not assigned as a beadle. Contact your form supervisor if you believe this is an error."
            )

        grade = normalize_grade_level(grade_level)
        start = parse_hhmm(class_start_time)
        is_double = parse_yes_no(is_double_session, "Double session")
        end = _optional_time(class_end_time_value) or class_end_time(start, is_double)
        if end <= start:
            raise ValidationError("End time must be later than start time.")

        try:
            present_count = int(students_present)
        except (TypeError, ValueError):
            raise ValidationError("Students present must be a number")
        if present_count < 0:
            raise ValidationError("Students present cannot be negative")

        present = parse_yes_no(teacher_present, "Teacher present")
        substitute = None
        if substitute_received not in (None, ""):
            substitute = parse_yes_no(substitute_received, "Substitute received")

        new_slip = NewBeadleSlip(
            beadle_user_id=current_user.user_id,
            beadle_email=current_user.email,
            grade_level=grade,
            class_name=validate_class_name(grade, class_name),
            slip_date=parse_iso_date(slip_date),
            class_start_time=start,
            class_end_time=end,
            is_double_session=is_double,
            teacher=require_non_empty(teacher, "Teacher"),
            subject=require_non_empty(subject, "Subject"),
            teacher_present=present,
            teacher_arrival_time=_optional_time(teacher_arrival_time) if present else None,
            substitute_received=substitute,
            homework_given=parse_yes_no(homework_given, "Homework given"),
            students_present=present_count,
            absent_students=_clean_names(absent_students),
            late_students=_clean_names(late_students),
        )
        slip_id = self._slips.create(new_slip)
        logger.info("slip %s submitted by user %s for %s", slip_id, current_user.user_id, new_slip.class_name)
        return slip_id

    def list_my_slips(self, *, user_id: int, limit: int = DEFAULT_LIST_LIMIT) -> list[BeadleSlip]:
        return list(self._slips.list_slips(beadle_user_id=int(user_id), limit=limit))

    def list_slips(
        self,
        *,
        grade_level: Optional[str] = None,
        slip_date: Optional[date] = None,
        search: Optional[str] = None,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> list[BeadleSlip]:
        grades = [normalize_grade_level(grade_level)] if grade_level else None
        slips = self._slips.list_slips(grade_levels=grades, slip_date=slip_date, limit=limit)

        return _search(slips, search)

    def supervisor_forms(self, user_id: int) -> list[str]:
        held = set(self._roles.role_names_of(int(user_id)))
        return [form for form, role_name in SUPERVISOR_ROLE_BY_FORM.items() if role_name in held]

    def list_for_supervisor(
        self, *, user_id: int, slip_date: Optional[date] = None, search: Optional[str] = None
    ) -> list[BeadleSlip]:
        slips = self._slips.list_slips(grade_levels=self.supervisor_forms(user_id), slip_date=slip_date)
        return _search(slips, search)

    def find_supervisor(self, grade_level: str) -> tuple[str, str]:
        """(name, email) of the form's supervisor, or the school's default mailbox."""

        grade = normalize_grade_level(grade_level)
        role_name = SUPERVISOR_ROLE_BY_FORM.get(grade)
        members = self._roles.members_by_role(role_name) if role_name else []
        if members:
            return members[0].full_name, members[0].email

        logger.warning("no supervisor assigned for %s, using default mailbox", grade)
        mailbox = grade.lower().replace(" ", "")
        return f"{grade} Supervisor", f"{mailbox}supervisor@{self._school_email_domain}"

    def build_form_report(self, grade_level: str, report_date: date) -> Optional[FormReport]:
        grade = normalize_grade_level(grade_level)
        slips = sorted(
            self._slips.list_slips(grade_levels=[grade], slip_date=report_date),
            key=lambda s: (s.class_start_time, s.slip_id),
        )
        if not slips:
            return None

        absences: dict[str, StudentClassRecord] = {}
        late_arrivals: dict[str, StudentClassRecord] = {}
        class_reports: list[ClassReport] = []

        for slip in slips:
            class_reports.append(
                ClassReport(
                    class_name=slip.class_name,
                    subject=slip.subject,
                    teacher=slip.teacher,
                    teacher_present=slip.teacher_present,
                    substitute_provided=bool(slip.substitute_received),
                    absent_students=slip.absent_students,
                    late_students=slip.late_students,
                    report_time=f"{slip.class_start_time:%H:%M} - {slip.class_end_time:%H:%M}",
                )
            )
            for bucket, names in ((absences, slip.absent_students), (late_arrivals, slip.late_students)):
                for name in names:
                    rec = bucket.setdefault(name, StudentClassRecord())
                    rec.classes.append(slip.class_name)
                    rec.subjects.append(slip.subject)
                    rec.teachers.append(slip.teacher)

        supervisor_name, supervisor_email = self.find_supervisor(grade)
        return FormReport(
            grade_level=grade,
            report_date=report_date,
            supervisor_name=supervisor_name,
            supervisor_email=supervisor_email,
            total_reports=len(slips),
            total_absent=sum(len(s.absent_students) for s in slips),
            total_late=sum(len(s.late_students) for s in slips),
            class_reports=tuple(class_reports),
            student_absences={k: absences[k] for k in sorted(absences)},
            student_late_arrivals={k: late_arrivals[k] for k in sorted(late_arrivals)},
        )

    def build_daily_reports(self, report_date: date, *, forms: Optional[Iterable[str]] = None) -> dict[str, FormReport]:
        reports: dict[str, FormReport] = {}
        for form in forms if forms is not None else FORM_LEVELS:
            report = self.build_form_report(form, report_date)
            if report is not None:
                reports[report.grade_level] = report
        logger.info("built %d form reports for %s", len(reports), report_date)
        return reports
