"""Billing-period computation: pass duration -> end date, hold adjustment"""
import calendar
from datetime import date, timedelta
from typing import Optional

from app.studio.models.passes import DurationUnit, PassDuration


def add_months(start: date, months: int) -> date:
    """
    Add calendar months keeping the day of month.

    When the target month is shorter (Jan 31 + 1 month) the result is clamped
    to the last day of the target month instead of rolling over.
    """
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(start.day, last_day))


def compute_end_date(start_date: date, duration: PassDuration) -> date:
    """
    Вычисляет дату окончания абонемента.

    - Days(n): inclusive window of n days, ``start + (n - 1)``.
    - Months(n): ``start + n`` calendar months (clamped), minus
      ``max(1, n // 3)`` days.
    """
    if duration.unit == DurationUnit.day:
        return start_date + timedelta(days=duration.value - 1)

    end = add_months(start_date, duration.value)
    return end - timedelta(days=max(1, duration.value // 3))


def hold_length(hold_start: Optional[date], hold_end: Optional[date]) -> int:
    """Inclusive hold length in days; 0 when absent or inverted"""
    if hold_start is None or hold_end is None or hold_end < hold_start:
        return 0
    return (hold_end - hold_start).days + 1


def apply_hold(
    base_end_date: date,
    hold_start: Optional[date] = None,
    hold_end: Optional[date] = None,
) -> date:
    """
    Сдвигает дату окончания на длительность заморозки.

    ``base_end_date`` must be freshly computed from the pass and start date,
    never a stored (possibly already extended) end date. An inverted interval
    is treated as no hold.
    """
    return base_end_date + timedelta(days=hold_length(hold_start, hold_end))
