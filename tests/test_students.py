from datetime import date

import pytest

from app.core.exceptions import NotFoundError, UnknownPassError, ValidationError
from app.studio.crud.attendance import toggle_attendance
from app.studio.crud.memberships import create_membership
from app.studio.crud.students import (
    create_student,
    delete_student,
    get_student_attendance,
    get_student_memberships,
    list_students,
    register_student,
    update_student,
)
from app.studio.schemas.students import StudentFilters
from app.studio.services.status import StatusTag


def test_register_creates_student_and_first_membership(store):
    student, membership = register_student(
        store, "Kim Minji", "010-1234-5678", "monthly_3x", "2024-01-31", payment_method="card"
    )

    assert store.students[student.id] == student
    assert membership.student_id == student.id
    assert membership.end_date == date(2024, 2, 28)


def test_register_with_unknown_pass_stores_nothing(store):
    with pytest.raises(UnknownPassError):
        register_student(store, "Kim Minji", "", "platinum", "2024-03-01")

    assert store.students == {}
    assert store.memberships == {}


def test_name_is_required(store):
    with pytest.raises(ValidationError):
        create_student(store, "  ")


def test_phone_is_validated(store):
    with pytest.raises(ValidationError):
        create_student(store, "Kim Minji", "12")


def test_update_student(store):
    student = create_student(store, "Kim Minji")

    updated = update_student(store, student.id, {"phone": "+82 10 1234 5678", "remarks": "new note"})

    assert updated.phone == "+82 10 1234 5678"
    assert updated.remarks == "new note"
    assert updated.registration_date == student.registration_date


def test_registration_date_is_not_editable(store):
    student = create_student(store, "Kim Minji")

    with pytest.raises(ValidationError):
        update_student(store, student.id, {"registration_date": "2020-01-01"})


def test_delete_cascades(store):
    student = create_student(store, "Kim Minji")
    other = create_student(store, "Lee Jisoo")
    create_membership(store, student.id, "one_day", "2024-03-01")
    create_membership(store, student.id, "one_week", "2024-03-05")
    kept = create_membership(store, other.id, "one_day", "2024-03-01")
    toggle_attendance(store, student.id, "2024-03-01", "fri-19:00")
    toggle_attendance(store, other.id, "2024-03-01", "fri-19:00")

    result = delete_student(store, student.id)

    assert result == {"memberships_deleted": 2, "attendance_deleted": 1}
    assert student.id not in store.students
    assert list(store.memberships) == [kept.id]
    assert [a.student_id for a in store.attendance.values()] == [other.id]


def test_delete_unknown_student(store):
    with pytest.raises(NotFoundError):
        delete_student(store, "missing")


def test_history_queries(store):
    student = create_student(store, "Kim Minji")
    later = create_membership(store, student.id, "one_week", "2024-03-10")
    earlier = create_membership(store, student.id, "one_day", "2024-03-01")
    toggle_attendance(store, student.id, "2024-03-01", "fri-19:00")
    toggle_attendance(store, student.id, "2024-03-08", "fri-19:00")

    assert get_student_memberships(store, student.id) == [earlier, later]
    assert [a.attendance_date for a in get_student_attendance(store, student.id)] == [
        date(2024, 3, 8),
        date(2024, 3, 1),
    ]


def test_list_students_with_status(store, today):
    active = create_student(store, "Bravo", "010-2222-3333")
    create_membership(store, active.id, "monthly_3x", "2024-03-01")
    expired = create_student(store, "alpha")
    create_membership(store, expired.id, "one_day", "2024-02-01")
    create_student(store, "Charlie")

    rows, total = list_students(store, today)

    assert total == 3
    assert [r.name for r in rows] == ["alpha", "Bravo", "Charlie"]
    assert [r.status.status for r in rows] == [
        StatusTag.expired,
        StatusTag.active,
        StatusTag.no_pass,
    ]


def test_list_students_filters_and_paging(store, today):
    for name in ["Ann", "Bob", "Cid"]:
        create_student(store, name)
    member = create_student(store, "Dee", "010-9999-0000")
    create_membership(store, member.id, "monthly_3x", "2024-03-01")

    rows, total = list_students(store, today, filters=StudentFilters(search="9999"))
    assert [r.name for r in rows] == ["Dee"]

    rows, total = list_students(store, today, filters=StudentFilters(status=StatusTag.no_pass))
    assert total == 3

    rows, total = list_students(store, today, skip=1, limit=2)
    assert total == 4
    assert [r.name for r in rows] == ["Bob", "Cid"]
