from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Optional

from ..common.datetime_utils import format_time_12h


@dataclass(frozen=True)
class BeadleSlip:
    """One per-class attendance report submitted by a beadle."""

    slip_id: int
    beadle_user_id: int
    beadle_email: str
    grade_level: str
    class_name: str
    slip_date: date
    class_start_time: time
    class_end_time: time
    is_double_session: bool
    teacher: str
    subject: str
    teacher_present: bool
    teacher_arrival_time: Optional[time]
    substitute_received: Optional[bool]
    homework_given: bool
    students_present: int
    absent_students: tuple[str, ...]
    late_students: tuple[str, ...]
    created_at: datetime

    def to_dict(self) -> dict:
        return {
            "id": self.slip_id,
            "beadle_user_id": self.beadle_user_id,
            "beadle_email": self.beadle_email,
            "grade_level": self.grade_level,
            "class_name": self.class_name,
            "date": self.slip_date.isoformat(),
            "class_start_time": self.class_start_time.strftime("%H:%M"),
            "class_end_time": self.class_end_time.strftime("%H:%M"),
            "time_range": f"{format_time_12h(self.class_start_time)} - {format_time_12h(self.class_end_time)}",
            "is_double_session": self.is_double_session,
            "teacher": self.teacher,
            "subject": self.subject,
            "teacher_present": self.teacher_present,
            "teacher_arrival_time": (
                self.teacher_arrival_time.strftime("%H:%M") if self.teacher_arrival_time else None
            ),
            "substitute_received": self.substitute_received,
            "homework_given": self.homework_given,
            "students_present": self.students_present,
            "absent_students": list(self.absent_students),
            "late_students": list(self.late_students),
            "created_at": self.created_at.isoformat(sep=" "),
        }


@dataclass(frozen=True)
class NewBeadleSlip:
    """Validated input for a new slip (no id/timestamps yet)."""

    beadle_user_id: int
    beadle_email: str
    grade_level: str
    class_name: str
    slip_date: date
    class_start_time: time
    class_end_time: time
    is_double_session: bool
    teacher: str
    subject: str
    teacher_present: bool
    teacher_arrival_time: Optional[time]
    substitute_received: Optional[bool]
    homework_given: bool
    students_present: int
    absent_students: tuple[str, ...]
    late_students: tuple[str, ...]


@dataclass
class StudentClassRecord:
    classes: list[str] = field(default_factory=list)
    subjects: list[str] = field(default_factory=list)
    teachers: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ClassReport:
    class_name: str
    subject: str
    teacher: str
    teacher_present: bool
    substitute_provided: bool
    absent_students: tuple[str, ...]
    late_students: tuple[str, ...]
    report_time: str


@dataclass(frozen=True)
class FormReport:
    """Daily summary of one form level, sent to its supervisor."""

    grade_level: str
    report_date: date
    supervisor_name: str
    supervisor_email: str
    total_reports: int
    total_absent: int
    total_late: int
    class_reports: tuple[ClassReport, ...]
    student_absences: dict[str, StudentClassRecord]
    student_late_arrivals: dict[str, StudentClassRecord]

    @property
    def has_issues(self) -> bool:
        return self.total_absent > 0 or self.total_late > 0

    def to_dict(self) -> dict:
        def records(data: dict[str, StudentClassRecord]) -> dict:
            return {
                name: {"classes": rec.classes, "subjects": rec.subjects, "teachers": rec.teachers}
                for name, rec in data.items()
            }

        return {
            "grade_level": self.grade_level,
            "date": self.report_date.isoformat(),
            "supervisor": {"name": self.supervisor_name, "email": self.supervisor_email},
            "total_reports": self.total_reports,
            "total_absent": self.total_absent,
            "total_late": self.total_late,
            "has_issues": self.has_issues,
            "class_reports": [
                {
                    "class_name": c.class_name,
                    "subject": c.subject,
                    "teacher": c.teacher,
                    "teacher_present": c.teacher_present,
                    "substitute_provided": c.substitute_provided,
                    "absent_students": list(c.absent_students),
                    "late_students": list(c.late_students),
                    "report_time": c.report_time,
                }
                for c in self.class_reports
            ],
            "student_absences": records(self.student_absences),
            "student_late_arrivals": records(self.student_late_arrivals),
        }
