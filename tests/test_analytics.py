from datetime import date

import pytest

from app.core.exceptions import ValidationError
from app.studio.crud.analytics import (
    get_attendance_summary,
    get_dashboard_summary,
    get_financial_report,
    get_revenue_by_period,
)
from app.studio.crud.attendance import toggle_attendance
from app.studio.crud.memberships import create_membership
from app.studio.crud.students import build_student


@pytest.fixture
def studio(store):
    students = {}
    for key, registered in [("s1", "2024-01-05"), ("s2", "2024-03-05"), ("s3", "2023-12-01")]:
        student = build_student(key.upper(), registration_date=registered)
        store.students[student.id] = student
        students[key] = student

    memberships = {
        "m1": create_membership(store, students["s1"].id, "monthly_3x", "2024-03-01"),
        "m2": create_membership(store, students["s2"].id, "monthly_2x", "2024-03-10", "2024-03-08"),
        "m3": create_membership(store, students["s3"].id, "one_day", "2024-02-10"),
    }
    return students, memberships


def test_dashboard_summary(store, today, studio):
    _, memberships = studio

    summary = get_dashboard_summary(store, today)

    assert summary.total_students == 3
    assert summary.status_counts["active"] == 2
    assert summary.status_counts["expired"] == 1
    assert summary.status_counts["holding"] == 0
    assert summary.active_memberships == 2
    assert summary.holding_memberships == 0
    assert summary.total_revenue == 350000
    assert [e.membership_id for e in summary.expiring_next_month] == [memberships["m2"].id]
    assert summary.expiring_next_month[0].end_date == date(2024, 4, 9)


@pytest.mark.parametrize(
    "period, expected",
    [
        ("month", [("2024-02", 30000), ("2024-03", 320000)]),
        ("year", [("2024", 350000)]),
        ("week", [("2024-W06", 30000), ("2024-W09", 170000), ("2024-W10", 150000)]),
    ],
)
def test_revenue_by_period(store, studio, period, expected):
    report = get_revenue_by_period(store, period)

    assert report.period == period
    assert [(b.key, b.revenue) for b in report.buckets] == expected


def test_financial_report(store, studio):
    _, memberships = studio

    report = get_financial_report(store, date(2024, 3, 1), date(2024, 3, 31))

    assert report.total_revenue == 320000
    assert [(p.pass_id, p.revenue) for p in report.revenue_by_pass] == [
        ("monthly_3x", 170000),
        ("monthly_2x", 150000),
    ]
    assert [t.membership_id for t in report.transactions] == [
        memberships["m2"].id,
        memberships["m1"].id,
    ]
    assert report.new_members_count == 1
    assert report.reregistered_members_count == 1


def test_financial_report_rejects_inverted_range(store):
    with pytest.raises(ValidationError):
        get_financial_report(store, date(2024, 3, 31), date(2024, 3, 1))


def test_attendance_summary(store, today, studio):
    students, _ = studio
    s1, s2, s3 = (students[key].id for key in ("s1", "s2", "s3"))
    marks = [
        (s1, "2024-02-05", "mon-19:00"),
        (s2, "2024-02-05", "mon-19:00"),
        (s3, "2024-02-05", "mon-19:00"),
        (s1, "2024-02-07", "wed-19:00"),
        (s1, "2024-03-04", "mon-19:00"),
        (s2, "2024-03-04", "mon-19:00"),
        (s1, "2024-03-06", "wed-19:00"),
        (s2, "2024-03-06", "wed-19:00"),
        (s3, "2024-03-08", "fri-18:00"),
        (s1, "2024-01-29", "mon-19:00"),
    ]
    for student_id, on, slot in marks:
        toggle_attendance(store, student_id, on, slot)

    summary = get_attendance_summary(store, today)

    assert summary.today == today
    assert summary.previous_month.month == "2024-02"
    assert summary.previous_month.total_attendance == 4
    assert summary.previous_month.days_with_attendance == 2
    assert summary.previous_month.average_daily == 2.0
    assert summary.current_month.month == "2024-03"
    assert summary.current_month.total_attendance == 5
    assert summary.current_month.days_with_attendance == 3
    assert summary.current_month.average_daily == 1.7
    assert [(s.class_slot, s.count) for s in summary.by_slot] == [
        ("mon-19:00", 6),
        ("wed-19:00", 3),
        ("fri-18:00", 1),
    ]


def test_attendance_summary_without_records(store):
    summary = get_attendance_summary(store, date(2024, 1, 20))

    assert summary.previous_month.month == "2023-12"
    assert summary.previous_month.average_daily == 0.0
    assert summary.current_month.days_with_attendance == 0
    assert summary.by_slot == []
