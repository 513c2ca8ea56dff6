"""Analytics Schemas - dashboard and financial report"""
from pydantic import BaseModel
from typing import Dict, List, Literal
from datetime import date


RevenuePeriod = Literal["week", "month", "year"]


class ExpiringMembership(BaseModel):
    """Абонемент, истекающий в следующем месяце"""
    membership_id: str
    student_id: str
    student_name: str
    pass_id: str
    end_date: date


class DashboardSummary(BaseModel):
    """Сводка для главной страницы"""
    today: date
    total_students: int = 0

    # Количество студентов по вычисленному статусу
    status_counts: Dict[str, int] = {}

    # Абонементы: действующие (без заморозки) и замороженные сегодня
    active_memberships: int = 0
    holding_memberships: int = 0

    total_revenue: int = 0
    expiring_next_month: List[ExpiringMembership] = []


class RevenueBucket(BaseModel):
    key: str
    revenue: int


class RevenueByPeriodResponse(BaseModel):
    period: RevenuePeriod
    buckets: List[RevenueBucket]


class PassRevenue(BaseModel):
    pass_id: str
    pass_name: str
    revenue: int


class Transaction(BaseModel):
    """Платеж за абонемент"""
    payment_date: date
    membership_id: str
    student_id: str
    student_name: str
    pass_id: str
    amount: int


class FinancialReport(BaseModel):
    """Финансовый отчет за период (по дате оплаты)"""
    start_date: date
    end_date: date
    total_revenue: int = 0
    revenue_by_pass: List[PassRevenue] = []
    transactions: List[Transaction] = []
    new_members_count: int = 0
    reregistered_members_count: int = 0


class MonthlyAttendance(BaseModel):
    """Посещаемость за календарный месяц"""
    month: str  # YYYY-MM
    total_attendance: int = 0
    days_with_attendance: int = 0
    average_daily: float = 0.0


class SlotAttendance(BaseModel):
    class_slot: str
    count: int


class AttendanceSummary(BaseModel):
    """Средняя дневная посещаемость и загрузка по слотам занятий"""
    today: date
    previous_month: MonthlyAttendance
    current_month: MonthlyAttendance
    by_slot: List[SlotAttendance] = []
