"""Status Classifier - derived membership status of a student"""
from datetime import date
from enum import Enum
from typing import Iterable, List, Optional

from pydantic import BaseModel

from app.studio.models.memberships import Membership

# Абонемент "скоро истекает", если осталось не больше 7 дней
EXPIRING_SOON_DAYS = 7


class StatusTag(str, Enum):
    """Статус студента, вычисляется при каждом чтении и не хранится"""
    no_pass = "no_pass"
    pending_start = "pending_start"
    holding = "holding"
    expired = "expired"
    expiring_soon = "expiring_soon"
    active = "active"


class StudentStatus(BaseModel):
    """Result of classifying a student's memberships on a given day"""
    status: StatusTag
    membership: Optional[Membership] = None  # representative membership
    days_until_start: Optional[int] = None   # pending_start only
    days_remaining: Optional[int] = None     # expiring_soon only
    combined_coverage_end: Optional[date] = None

    @property
    def is_current(self) -> bool:
        """Membership in force today (active or about to expire)"""
        return self.status in (StatusTag.active, StatusTag.expiring_soon)


def select_representative(memberships: List[Membership], today: date) -> Optional[Membership]:
    """
    Pick the membership that summarizes a student's status.

    Priority: one covering today (the earliest-ending one when passes stack),
    then the soonest future start, then the most recent past end, then the
    maximum end date.
    """
    if not memberships:
        return None

    covering = [m for m in memberships if m.covers(today)]
    if covering:
        return min(covering, key=lambda m: (m.end_date, m.start_date))

    upcoming = [m for m in memberships if m.start_date > today]
    if upcoming:
        return min(upcoming, key=lambda m: m.start_date)

    past = [m for m in memberships if m.end_date < today]
    if past:
        return max(past, key=lambda m: m.end_date)

    return max(memberships, key=lambda m: m.end_date)


def combined_coverage_end(memberships: Iterable[Membership], today: date) -> Optional[date]:
    ends = [m.end_date for m in memberships if m.end_date >= today]
    return max(ends) if ends else None


def classify(memberships: Iterable[Membership], today: date) -> StudentStatus:
    memberships = list(memberships)
    representative = select_representative(memberships, today)
    if representative is None:
        return StudentStatus(status=StatusTag.no_pass)

    coverage_end = combined_coverage_end(memberships, today)

    def result(tag: StatusTag, **kwargs) -> StudentStatus:
        return StudentStatus(
            status=tag,
            membership=representative,
            combined_coverage_end=coverage_end,
            **kwargs,
        )

    if representative.start_date > today:
        return result(
            StatusTag.pending_start,
            days_until_start=(representative.start_date - today).days,
        )

    if representative.is_holding(today):
        return result(StatusTag.holding)

    if representative.end_date < today:
        return result(StatusTag.expired)

    days_remaining = (representative.end_date - today).days
    if days_remaining <= EXPIRING_SOON_DAYS:
        return result(StatusTag.expiring_soon, days_remaining=days_remaining)

    return result(StatusTag.active)


def is_active_not_holding(membership: Membership, today: date) -> bool:
    """Predicate shared by bulk extension and dashboard counts"""
    return membership.end_date >= today and not membership.is_holding(today)
