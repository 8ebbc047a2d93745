from __future__ import annotations

from datetime import date, time
from typing import Any, Dict, Optional, Sequence

from ..common.datetime_utils import from_db_timestamp
from ..database.connection import DatabaseConnection
from ..database.sqlite_base import db_cursor, dump_names, fetchall, fetchone, load_names, placeholders
from .model import BeadleSlip, NewBeadleSlip
from .repository import SlipRepository

SLIP_COLUMNS = """
    slip_id, beadle_user_id, beadle_email, grade_level, class_name, slip_date,
    class_start_time, class_end_time, is_double_session, teacher, subject,
    teacher_present, teacher_arrival_time, substitute_received, homework_given,
    students_present, absent_students, late_students, created_at
"""


def _hhmm(value: Optional[time]) -> Optional[str]:
    return value.strftime("%H:%M") if value else None


def _parse_time(value: Optional[str]) -> Optional[time]:
    return time.fromisoformat(value) if value else None


def row_to_slip(r: Dict[str, Any]) -> BeadleSlip:
    substitute = r.get("substitute_received")
    return BeadleSlip(
        slip_id=int(r["slip_id"]),
        beadle_user_id=int(r["beadle_user_id"]),
        beadle_email=r["beadle_email"],
        grade_level=r["grade_level"],
        class_name=r["class_name"],
        slip_date=date.fromisoformat(r["slip_date"]),
        class_start_time=_parse_time(r["class_start_time"]),
        class_end_time=_parse_time(r["class_end_time"]),
        is_double_session=bool(r["is_double_session"]),
        teacher=r["teacher"],
        subject=r["subject"],
        teacher_present=bool(r["teacher_present"]),
        teacher_arrival_time=_parse_time(r.get("teacher_arrival_time")),
        substitute_received=None if substitute is None else bool(substitute),
        homework_given=bool(r["homework_given"]),
        students_present=int(r["students_present"]),
        absent_students=load_names(r.get("absent_students")),
        late_students=load_names(r.get("late_students")),
        created_at=from_db_timestamp(r["created_at"]),
    )


class SQLiteSlipRepository(SlipRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, slip: NewBeadleSlip) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO beadle_slips(
                    beadle_user_id, beadle_email, grade_level, class_name, slip_date,
                    class_start_time, class_end_time, is_double_session, teacher, subject,
                    teacher_present, teacher_arrival_time, substitute_received, homework_given,
                    students_present, absent_students, late_students
                )
                VALUES(?,?,?,?,?,?,?,?,?,?,?,?,?,?,?,?,?)
                """,
                (
                    int(slip.beadle_user_id),
                    slip.beadle_email,
                    slip.grade_level,
                    slip.class_name,
                    slip.slip_date.isoformat(),
                    _hhmm(slip.class_start_time),
                    _hhmm(slip.class_end_time),
                    int(slip.is_double_session),
                    slip.teacher,
                    slip.subject,
                    int(slip.teacher_present),
                    _hhmm(slip.teacher_arrival_time),
                    None if slip.substitute_received is None else int(slip.substitute_received),
                    int(slip.homework_given),
                    int(slip.students_present),
                    dump_names(slip.absent_students),
                    dump_names(slip.late_students),
                ),
            )
            return int(cur.lastrowid)

    def get_by_id(self, slip_id: int) -> Optional[BeadleSlip]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {SLIP_COLUMNS} FROM beadle_slips WHERE slip_id=?", (int(slip_id),))
            r = fetchone(cur)
            return row_to_slip(r) if r else None

    def list_slips(
        self,
        *,
        beadle_user_id: Optional[int] = None,
        grade_levels: Optional[Sequence[str]] = None,
        slip_date: Optional[date] = None,
        limit: int = 500,
    ) -> Sequence[BeadleSlip]:
        clauses = ["1=1"]
        params: list[object] = []

        if beadle_user_id is not None:
            clauses.append("beadle_user_id=?")
            params.append(int(beadle_user_id))
        if grade_levels is not None:
            if not grade_levels:
                return []
            clauses.append(f"grade_level IN ({placeholders(grade_levels)})")
            params.extend(grade_levels)
        if slip_date is not None:
            clauses.append("slip_date=?")
            params.append(slip_date.isoformat())

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {SLIP_COLUMNS}
                FROM beadle_slips
                WHERE {where}
                ORDER BY slip_date DESC, class_start_time DESC, slip_id DESC
                LIMIT ?
                """,
                tuple(params + [int(limit)]),
            )
            return [row_to_slip(r) for r in fetchall(cur)]
