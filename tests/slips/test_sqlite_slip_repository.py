from __future__ import annotations

from datetime import date, time

from src.beadle_system.beadle_system.slips.model import NewBeadleSlip


def new_slip(user_id, **overrides):
    data = dict(
        beadle_user_id=user_id,
        beadle_email="beadle@campioncollege.com",
        grade_level="3rd Form",
        class_name="3A",
        slip_date=date(2026, 3, 2),
        class_start_time=time(10, 0),
        class_end_time=time(10, 35),
        is_double_session=False,
        teacher="Mrs. White",
        subject="Spanish",
        teacher_present=False,
        teacher_arrival_time=None,
        substitute_received=None,
        homework_given=True,
        students_present=25,
        absent_students=("Ann Bee", "Carl Dee"),
        late_students=(),
    )
    data.update(overrides)
    return NewBeadleSlip(**data)


def test_create_and_read_back(container, make_user):
    uid = make_user(roles=["student", "beadle"])

    sid = container.slips_repo.create(new_slip(uid))
    slip = container.slips_repo.get_by_id(sid)

    assert slip.class_start_time == time(10, 0)
    assert slip.teacher_present is False
    assert slip.substitute_received is None
    assert slip.homework_given is True
    assert slip.absent_students == ("Ann Bee", "Carl Dee")
    assert slip.late_students == ()
    assert slip.created_at is not None


def test_list_filters_newest_first(container, make_user):
    uid = make_user(roles=["beadle"])
    other = make_user(roles=["beadle"])
    a = container.slips_repo.create(new_slip(uid))
    b = container.slips_repo.create(new_slip(uid, grade_level="4th Form", class_name="4A"))
    c = container.slips_repo.create(new_slip(other, slip_date=date(2026, 3, 3)))

    repo = container.slips_repo
    assert [s.slip_id for s in repo.list_slips()] == [c, b, a]
    assert [s.slip_id for s in repo.list_slips(beadle_user_id=uid)] == [b, a]
    assert [s.slip_id for s in repo.list_slips(grade_levels=["3rd Form"])] == [c, a]
    assert [s.slip_id for s in repo.list_slips(slip_date=date(2026, 3, 3))] == [c]
    assert repo.list_slips(grade_levels=[]) == []
    assert len(repo.list_slips(limit=1)) == 1
