"""Analytics CRUD - dashboard counts, attendance and financial aggregation"""
from collections import Counter, defaultdict
from datetime import date, timedelta
from typing import Dict

from app.core.exceptions import ValidationError
from app.core.store import StudioStore
from app.studio.schemas.analytics import (
    AttendanceSummary,
    DashboardSummary,
    ExpiringMembership,
    FinancialReport,
    MonthlyAttendance,
    PassRevenue,
    RevenueBucket,
    RevenueByPeriodResponse,
    RevenuePeriod,
    SlotAttendance,
    Transaction,
)
from app.studio.services.durations import add_months
from app.studio.services.status import StatusTag, classify, is_active_not_holding

UNKNOWN_STUDENT = "Unknown student"


def _next_month_bounds(today: date):
    first = add_months(today.replace(day=1), 1)
    last = add_months(first, 1) - timedelta(days=1)
    return first, last


def get_dashboard_summary(store: StudioStore, today: date) -> DashboardSummary:
    """Сводка: статусы студентов, действующие абонементы, выручка, истекающие"""
    grouped = store.memberships_by_student()

    status_counts: Dict[str, int] = {tag.value: 0 for tag in StatusTag}
    for student_id in store.students:
        status = classify(grouped.get(student_id, []), today)
        status_counts[status.status.value] += 1

    memberships = list(store.memberships.values())
    first, last = _next_month_bounds(today)

    expiring = [
        ExpiringMembership(
            membership_id=m.id,
            student_id=m.student_id,
            student_name=(
                store.students[m.student_id].name
                if m.student_id in store.students
                else UNKNOWN_STUDENT
            ),
            pass_id=m.pass_id,
            end_date=m.end_date,
        )
        for m in memberships
        if first <= m.end_date <= last
    ]
    expiring.sort(key=lambda e: e.end_date)

    return DashboardSummary(
        today=today,
        total_students=len(store.students),
        status_counts=status_counts,
        active_memberships=sum(1 for m in memberships if is_active_not_holding(m, today)),
        holding_memberships=sum(1 for m in memberships if m.is_holding(today)),
        total_revenue=sum(m.price for m in memberships),
        expiring_next_month=expiring,
    )


def _period_key(day: date, period: RevenuePeriod) -> str:
    if period == "week":
        year, week, _ = day.isocalendar()
        return f"{year}-W{week:02d}"
    if period == "month":
        return f"{day.year}-{day.month:02d}"
    return str(day.year)


def _month_attendance(store: StudioStore, month_start: date) -> MonthlyAttendance:
    records = [
        a
        for a in store.attendance.values()
        if (a.attendance_date.year, a.attendance_date.month) == (month_start.year, month_start.month)
    ]
    days = len({a.attendance_date for a in records})
    return MonthlyAttendance(
        month=f"{month_start.year}-{month_start.month:02d}",
        total_attendance=len(records),
        days_with_attendance=days,
        average_daily=round(len(records) / days, 1) if days else 0.0,
    )


def get_attendance_summary(store: StudioStore, today: date) -> AttendanceSummary:
    """
    Посещаемость: среднее число отметок в день (только дни с занятиями)
    за текущий и предыдущий месяц, и число отметок по слотам занятий.
    """
    month_start = today.replace(day=1)
    slot_counts = Counter(a.class_slot for a in store.attendance.values())

    return AttendanceSummary(
        today=today,
        previous_month=_month_attendance(store, add_months(month_start, -1)),
        current_month=_month_attendance(store, month_start),
        by_slot=[
            SlotAttendance(class_slot=slot, count=count)
            for slot, count in sorted(slot_counts.items(), key=lambda item: (-item[1], item[0]))
        ],
    )


def get_revenue_by_period(store: StudioStore, period: RevenuePeriod) -> RevenueByPeriodResponse:
    """Выручка по неделям/месяцам/годам (по дате начала абонемента)"""
    if period not in ("week", "month", "year"):
        raise ValidationError(f"Unsupported period '{period}'", {"period": period})

    totals: Dict[str, int] = defaultdict(int)
    for membership in store.memberships.values():
        totals[_period_key(membership.start_date, period)] += membership.price

    return RevenueByPeriodResponse(
        period=period,
        buckets=[RevenueBucket(key=key, revenue=totals[key]) for key in sorted(totals)],
    )


def get_financial_report(store: StudioStore, start_date: date, end_date: date) -> FinancialReport:
    """
    Financial report for memberships paid within [start_date, end_date].

    Paying students registered inside the period count as new members,
    those registered before it as re-registrations.
    """
    if end_date < start_date:
        raise ValidationError(
            "Report end date is before its start date",
            {"start_date": start_date.isoformat(), "end_date": end_date.isoformat()},
        )

    paid = [m for m in store.memberships.values() if start_date <= m.payment_date <= end_date]

    by_pass: Dict[str, int] = defaultdict(int)
    for membership in paid:
        by_pass[membership.pass_id] += membership.price

    revenue_by_pass = []
    for pass_id, revenue in sorted(by_pass.items(), key=lambda item: -item[1]):
        name = store.catalog.get(pass_id).name if pass_id in store.catalog else pass_id
        revenue_by_pass.append(PassRevenue(pass_id=pass_id, pass_name=name, revenue=revenue))

    transactions = [
        Transaction(
            payment_date=m.payment_date,
            membership_id=m.id,
            student_id=m.student_id,
            student_name=(
                store.students[m.student_id].name
                if m.student_id in store.students
                else UNKNOWN_STUDENT
            ),
            pass_id=m.pass_id,
            amount=m.price,
        )
        for m in paid
    ]
    transactions.sort(key=lambda t: t.payment_date, reverse=True)

    new_members = 0
    reregistered = 0
    for student_id in {m.student_id for m in paid}:
        student = store.students.get(student_id)
        if not student:
            continue
        registered_on = student.registration_date.date()
        if start_date <= registered_on <= end_date:
            new_members += 1
        elif registered_on < start_date:
            reregistered += 1

    return FinancialReport(
        start_date=start_date,
        end_date=end_date,
        total_revenue=sum(m.price for m in paid),
        revenue_by_pass=revenue_by_pass,
        transactions=transactions,
        new_members_count=new_members,
        reregistered_members_count=reregistered,
    )
