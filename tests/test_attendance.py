from datetime import date

import pytest

from app.core.exceptions import NotFoundError, ValidationError
from app.studio.crud.attendance import eligible_students, toggle_attendance
from app.studio.crud.students import create_student


def test_toggle_marks_then_unmarks(store):
    student = create_student(store, "Kim Minji")

    present, record = toggle_attendance(store, student.id, "2024-03-15", "fri-19:00")
    assert present is True
    assert record.attendance_date == date(2024, 3, 15)
    assert len(store.attendance) == 1

    present, removed = toggle_attendance(store, student.id, date(2024, 3, 15), "fri-19:00")
    assert present is False
    assert removed.id == record.id
    assert store.attendance == {}


def test_slots_are_independent(store):
    student = create_student(store, "Kim Minji")

    toggle_attendance(store, student.id, "2024-03-15", "fri-18:00")
    toggle_attendance(store, student.id, "2024-03-15", "fri-19:00")

    assert len(store.attendance) == 2


def test_unknown_student(store):
    with pytest.raises(NotFoundError):
        toggle_attendance(store, "missing", "2024-03-15", "fri-19:00")


def test_blank_slot(store):
    student = create_student(store, "Kim Minji")
    with pytest.raises(ValidationError):
        toggle_attendance(store, student.id, "2024-03-15", " ")


def test_eligible_students(store, today, make_membership):
    active = create_student(store, "Active")
    holding = create_student(store, "Holding")
    pending = create_student(store, "Pending")
    create_student(store, "Nobody")

    for membership in [
        make_membership(student_id=active.id),
        make_membership(
            student_id=holding.id,
            hold_start_date=date(2024, 3, 14),
            hold_end_date=date(2024, 3, 16),
        ),
        make_membership(student_id=pending.id, start="2024-03-20", end="2024-04-19"),
    ]:
        store.memberships[membership.id] = membership

    assert [s.name for s in eligible_students(store, today)] == ["Active"]
    assert [s.name for s in eligible_students(store, date(2024, 3, 20))] == [
        "Active",
        "Holding",
        "Pending",
    ]
