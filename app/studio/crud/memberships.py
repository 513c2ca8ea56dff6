"""Memberships CRUD - lifecycle engine (create, renew, edit) and bulk extension"""
import logging
from datetime import date, timedelta
from typing import Any, Dict, List, Optional, Union

from app.core.exceptions import ValidationError
from app.core.logging_utils import log_business_event
from app.core.store import StudioStore
from app.core.validations import DateLike, parse_date, parse_optional_date
from app.studio.models.memberships import Membership, PaymentMethod
from app.studio.schemas.memberships import BulkExtendResponse
from app.studio.services.durations import apply_hold, compute_end_date
from app.studio.services.status import is_active_not_holding

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = {
    "pass_id",
    "start_date",
    "payment_date",
    "payment_method",
    "cash_receipt_issued",
    "hold_start_date",
    "hold_end_date",
}
HOLD_FIELDS = ("hold_start_date", "hold_end_date")


def parse_payment_method(value: Union[PaymentMethod, str, None]) -> PaymentMethod:
    if value is None or value == "":
        return PaymentMethod.card
    if isinstance(value, PaymentMethod):
        return value
    try:
        return PaymentMethod(str(value).strip().lower())
    except ValueError:
        raise ValidationError(
            f"Invalid payment method '{value}'",
            {"field": "payment_method", "allowed": [m.value for m in PaymentMethod]},
        )


def receipt_flag(payment_method: PaymentMethod, cash_receipt_issued: bool) -> bool:
    """Cash receipt is only meaningful for cash payments"""
    return bool(cash_receipt_issued) if payment_method == PaymentMethod.cash else False


def build_membership(
    store: StudioStore,
    student_id: str,
    pass_id: str,
    start_date: DateLike,
    payment_date: Optional[DateLike] = None,
    payment_method: Union[PaymentMethod, str, None] = PaymentMethod.card,
    cash_receipt_issued: bool = False,
    end_date: Optional[date] = None,
) -> Membership:
    """
    Build (but do not store) a membership priced and dated from the catalog.

    ``end_date`` overrides the computed window; renewals use it to pass the
    chained end date.
    """
    definition = store.catalog.get(pass_id)
    start = parse_date(start_date, "start_date")
    paid_on = parse_optional_date(payment_date, "payment_date") or start
    method = parse_payment_method(payment_method)

    return Membership(
        student_id=student_id,
        pass_id=definition.id,
        start_date=start,
        end_date=end_date or compute_end_date(start, definition.duration),
        price=definition.price,
        payment_date=paid_on,
        payment_method=method,
        cash_receipt_issued=receipt_flag(method, cash_receipt_issued),
    )


def create_membership(
    store: StudioStore,
    student_id: str,
    pass_id: str,
    start_date: DateLike,
    payment_date: Optional[DateLike] = None,
    payment_method: Union[PaymentMethod, str, None] = PaymentMethod.card,
    cash_receipt_issued: bool = False,
) -> Membership:
    """Issue a membership; existing memberships of the student are untouched"""
    store.get_student(student_id)

    membership = build_membership(
        store, student_id, pass_id, start_date, payment_date, payment_method, cash_receipt_issued
    )
    store.memberships[membership.id] = membership

    log_business_event(
        "membership_created",
        "membership",
        membership.id,
        {
            "student_id": student_id,
            "pass_id": membership.pass_id,
            "start_date": membership.start_date.isoformat(),
            "end_date": membership.end_date.isoformat(),
            "price": membership.price,
        },
    )
    store.notify_changed("membership_created", {"membership_id": membership.id})
    return membership


def latest_membership(memberships: List[Membership]) -> Optional[Membership]:
    if not memberships:
        return None
    return max(memberships, key=lambda m: m.end_date)


def renew_membership(
    store: StudioStore,
    student_id: str,
    pass_id: str,
    start_date: DateLike,
    payment_date: Optional[DateLike] = None,
    payment_method: Union[PaymentMethod, str, None] = PaymentMethod.card,
    cash_receipt_issued: bool = False,
) -> Membership:
    """
    Повторная регистрация: новый абонемент для студента с историей.

    The new window is chained from the end of the latest existing coverage.
    If that chained end does not reach past the new start date (a long gap
    since expiry) the window is computed fresh from the start date instead.
    Without prior memberships this is a plain create.
    """
    store.get_student(student_id)

    latest = latest_membership(store.memberships_for(student_id))
    if latest is None:
        return create_membership(
            store, student_id, pass_id, start_date, payment_date, payment_method, cash_receipt_issued
        )

    duration = store.catalog.duration_of(pass_id)
    start = parse_date(start_date, "start_date")

    candidate_end = compute_end_date(latest.end_date, duration)
    continuous = candidate_end > start
    end = candidate_end if continuous else compute_end_date(start, duration)

    membership = build_membership(
        store,
        student_id,
        pass_id,
        start,
        payment_date,
        payment_method,
        cash_receipt_issued,
        end_date=end,
    )
    store.memberships[membership.id] = membership

    log_business_event(
        "membership_renewed",
        "membership",
        membership.id,
        {
            "student_id": student_id,
            "pass_id": membership.pass_id,
            "previous_membership_id": latest.id,
            "previous_end_date": latest.end_date.isoformat(),
            "end_date": membership.end_date.isoformat(),
            "continuous": continuous,
        },
    )
    store.notify_changed("membership_renewed", {"membership_id": membership.id})
    return membership


def _patch_hold(patch: Dict[str, Any]):
    """
    Returns (hold_start, hold_end, supplied).

    ``supplied`` is True only when the patch carries a usable hold pair:
    both dates (or both explicit nulls, which clear the hold).
    """
    present = [field in patch for field in HOLD_FIELDS]
    if not any(present):
        return None, None, False
    if not all(present):
        raise ValidationError(
            "Hold start and end dates must be supplied together",
            {"fields": list(HOLD_FIELDS)},
        )

    hold_start = parse_optional_date(patch["hold_start_date"], "hold_start_date")
    hold_end = parse_optional_date(patch["hold_end_date"], "hold_end_date")

    if (hold_start is None) != (hold_end is None):
        raise ValidationError(
            "Hold start and end dates must be supplied together",
            {"fields": list(HOLD_FIELDS)},
        )

    if hold_start and hold_end and hold_end < hold_start:
        logger.warning(
            f"Ignoring inverted hold interval {hold_start}..{hold_end}",
            extra={"hold_start_date": str(hold_start), "hold_end_date": str(hold_end)},
        )
        return None, None, False

    return hold_start, hold_end, True


def update_membership(
    store: StudioStore, membership_id: str, patch: Dict[str, Any]
) -> Membership:
    """
    Edit a membership with the fields present in ``patch``.

    When the pass, the start date or a hold pair changes, the end date is
    recomputed from a fresh base window for the effective pass and start,
    then extended only by the hold carried in the patch. Stored hold dates
    survive an edit that does not mention them but do not extend the new
    window.
    """
    membership = store.get_membership(membership_id)

    unknown = set(patch) - EDITABLE_FIELDS
    if unknown:
        raise ValidationError(
            f"Fields cannot be edited: {', '.join(sorted(unknown))}",
            {"fields": sorted(unknown)},
        )

    updates: Dict[str, Any] = {}

    if patch.get("pass_id") is not None:
        definition = store.catalog.get(patch["pass_id"])
        updates["pass_id"] = definition.id
        updates["price"] = definition.price

    if patch.get("start_date") is not None:
        updates["start_date"] = parse_date(patch["start_date"], "start_date")

    if patch.get("payment_date") is not None:
        updates["payment_date"] = parse_date(patch["payment_date"], "payment_date")

    if patch.get("payment_method") is not None:
        updates["payment_method"] = parse_payment_method(patch["payment_method"])

    if patch.get("cash_receipt_issued") is not None:
        updates["cash_receipt_issued"] = bool(patch["cash_receipt_issued"])

    hold_start, hold_end, hold_supplied = _patch_hold(patch)
    if hold_supplied:
        updates["hold_start_date"] = hold_start
        updates["hold_end_date"] = hold_end

    if "pass_id" in updates or "start_date" in updates or hold_supplied:
        pass_id = updates.get("pass_id", membership.pass_id)
        start = updates.get("start_date", membership.start_date)
        base_end = compute_end_date(start, store.catalog.duration_of(pass_id))
        updates["end_date"] = (
            apply_hold(base_end, hold_start, hold_end) if hold_supplied else base_end
        )

    method = updates.get("payment_method", membership.payment_method)
    receipt = updates.get("cash_receipt_issued", membership.cash_receipt_issued)
    updates["cash_receipt_issued"] = receipt_flag(method, receipt)

    # Новая версия собирается целиком и только потом заменяет старую
    updated = membership.model_copy(update=updates)
    store.memberships[membership_id] = updated

    log_business_event(
        "membership_updated",
        "membership",
        membership_id,
        {
            "fields": sorted(patch),
            "end_date": updated.end_date.isoformat(),
            "previous_end_date": membership.end_date.isoformat(),
        },
    )
    store.notify_changed("membership_updated", {"membership_id": membership_id})
    return updated


def bulk_extend(
    store: StudioStore, days: int, reason: str, today: date
) -> BulkExtendResponse:
    """
    Extend every membership of every currently active student.

    A student qualifies when ANY of their memberships is not expired and not
    on hold today; then ALL of that student's memberships are shifted, and
    a dated remark is appended to the student.
    """
    if days < 1:
        raise ValidationError("Extension must be at least 1 day", {"days": days})

    student_ids = {
        m.student_id
        for m in store.memberships.values()
        if is_active_not_holding(m, today)
    }

    if not student_ids:
        logger.info("Bulk extension skipped: no active students")
        return BulkExtendResponse(days=days, reason=reason)

    shift = timedelta(days=days)
    affected_memberships = 0
    for membership in store.memberships.values():
        if membership.student_id in student_ids:
            membership.end_date = membership.end_date + shift
            affected_memberships += 1

    remark = f"[{today.isoformat()}] Extended {days} day(s): {reason}"
    for student_id in student_ids:
        student = store.students.get(student_id)
        if student:
            student.append_remark(remark)

    log_business_event(
        "memberships_bulk_extended",
        "membership",
        None,
        {
            "days": days,
            "reason": reason,
            "students": len(student_ids),
            "memberships": affected_memberships,
        },
    )
    store.notify_changed("memberships_bulk_extended", {"student_ids": sorted(student_ids)})

    return BulkExtendResponse(
        affected_students=len(student_ids),
        affected_memberships=affected_memberships,
        student_ids=sorted(student_ids),
        days=days,
        reason=reason,
    )
