"""Analytics Router - dashboard, attendance and financial reporting"""
from datetime import date, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from app.core.dependencies import get_store, get_today
from app.core.limits import limiter
from app.core.store import StudioStore
from app.studio.crud.analytics import (
    get_attendance_summary,
    get_dashboard_summary,
    get_financial_report,
    get_revenue_by_period,
)
from app.studio.schemas.analytics import (
    AttendanceSummary,
    DashboardSummary,
    FinancialReport,
    RevenueByPeriodResponse,
    RevenuePeriod,
)
from app.studio.services.durations import add_months

router = APIRouter(prefix="/analytics", tags=["Analytics"])


@router.get("/dashboard", response_model=DashboardSummary)
@limiter.limit("30/minute")
async def get_dashboard(
    request: Request,
    store: StudioStore = Depends(get_store),
    today: date = Depends(get_today),
):
    """Student status counts, membership counts, revenue and expiring passes."""
    return get_dashboard_summary(store, today)


@router.get("/attendance", response_model=AttendanceSummary)
@limiter.limit("30/minute")
async def get_attendance(
    request: Request,
    store: StudioStore = Depends(get_store),
    today: date = Depends(get_today),
):
    """Average daily attendance for this and last month, and counts per class slot."""
    return get_attendance_summary(store, today)


@router.get("/revenue", response_model=RevenueByPeriodResponse)
@limiter.limit("30/minute")
async def get_revenue(
    request: Request,
    period: RevenuePeriod = Query("month", description="week, month or year"),
    store: StudioStore = Depends(get_store),
):
    """Revenue grouped by the start date of memberships."""
    return get_revenue_by_period(store, period)


@router.get("/financial", response_model=FinancialReport)
@limiter.limit("30/minute")
async def get_financial(
    request: Request,
    start_date: Optional[date] = Query(None, description="Defaults to first day of this month"),
    end_date: Optional[date] = Query(None, description="Defaults to last day of this month"),
    store: StudioStore = Depends(get_store),
    today: date = Depends(get_today),
):
    """Financial report by payment date; defaults to the current month."""
    month_start = today.replace(day=1)
    start = start_date or month_start
    end = end_date or add_months(month_start, 1) - timedelta(days=1)
    return get_financial_report(store, start, end)
