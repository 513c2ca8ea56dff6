"""Import/Export CRUD - reconcile flat external records with the store"""
import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

from app.core.exceptions import BaseAppException, ValidationError
from app.core.logging_utils import log_business_event
from app.core.store import StudioStore
from app.core.validations import (
    parse_bool,
    parse_datetime,
    parse_optional_date,
    parse_price,
)
from app.studio.crud.memberships import latest_membership, parse_payment_method, receipt_flag
from app.studio.crud.students import build_student
from app.studio.models.memberships import Membership
from app.studio.models.students import Student
from app.studio.schemas.imports import (
    MEMBERSHIP_FIELDS,
    RECORD_FIELDS,
    ImportDiagnostic,
    ImportResult,
)

logger = logging.getLogger(__name__)

_DATE_FIELDS = {
    "membership_start_date": "start_date",
    "membership_end_date": "end_date",
    "membership_payment_date": "payment_date",
    "membership_hold_start_date": "hold_start_date",
    "membership_hold_end_date": "hold_end_date",
}


def _value(record: Dict[str, Any], key: str) -> Optional[str]:
    """Field value as a stripped string; blank and missing are both None"""
    raw = record.get(key)
    if raw is None:
        return None
    text = str(raw).strip()
    return text or None


def _parse_membership_fields(store: StudioStore, record: Dict[str, Any]) -> Dict[str, Any]:
    """Validate the membership columns that are present in the record"""
    fields: Dict[str, Any] = {}

    pass_id = _value(record, "membership_pass_id")
    if pass_id is not None:
        fields["pass_id"] = store.catalog.get(pass_id).id

    for column, attr in _DATE_FIELDS.items():
        value = parse_optional_date(_value(record, column), column)
        if value is not None:
            fields[attr] = value

    price = _value(record, "membership_price")
    if price is not None:
        fields["price"] = parse_price(price, "membership_price")

    method = _value(record, "membership_payment_method")
    if method is not None:
        fields["payment_method"] = parse_payment_method(method)

    receipt = _value(record, "membership_cash_receipt_issued")
    if receipt is not None:
        fields["cash_receipt_issued"] = parse_bool(receipt, "membership_cash_receipt_issued")

    if ("hold_start_date" in fields) != ("hold_end_date" in fields):
        raise ValidationError(
            "Hold start and end dates must be supplied together",
            {"fields": ["membership_hold_start_date", "membership_hold_end_date"]},
        )

    return fields


def _check_membership(membership: Membership) -> Membership:
    if membership.end_date < membership.start_date:
        raise ValidationError(
            "Membership end date is before its start date",
            {
                "start_date": membership.start_date.isoformat(),
                "end_date": membership.end_date.isoformat(),
            },
        )
    if membership.has_hold and membership.hold_end_date < membership.hold_start_date:
        raise ValidationError(
            "Membership hold ends before it starts",
            {
                "hold_start_date": membership.hold_start_date.isoformat(),
                "hold_end_date": membership.hold_end_date.isoformat(),
            },
        )
    membership.cash_receipt_issued = receipt_flag(
        membership.payment_method, membership.cash_receipt_issued
    )
    return membership


def _plan_student(store: StudioStore, record: Dict[str, Any]) -> Tuple[Student, bool]:
    """Returns the student to store and whether it is a new one"""
    name = _value(record, "student_name")
    if name is None:
        raise ValidationError("Student name is required", {"field": "student_name"})

    student_id = _value(record, "student_id")
    registration = _value(record, "student_registration_date")
    existing = store.students.get(student_id) if student_id else None

    if existing is None:
        student = build_student(
            name,
            _value(record, "student_phone") or "",
            _value(record, "student_remarks") or "",
            registration_date=registration,
            student_id=student_id,
            strict_phone=False,
        )
        return student, True

    # Полная замена полей существующего студента
    student = Student(
        id=existing.id,
        name=name,
        phone=_value(record, "student_phone") or "",
        remarks=_value(record, "student_remarks") or "",
        registration_date=(
            parse_datetime(registration, "student_registration_date")
            if registration
            else existing.registration_date
        ),
    )
    return student, False


def _plan_membership(
    store: StudioStore, student_id: str, record: Dict[str, Any]
) -> Tuple[Optional[Membership], Optional[str]]:
    """
    Returns (membership to store, id of the row it replaces).

    Imported end dates and prices are authoritative and never recomputed.
    """
    if not any(_value(record, column) for column in MEMBERSHIP_FIELDS):
        return None, None

    fields = _parse_membership_fields(store, record)
    membership_id = _value(record, "membership_id")
    owned = store.memberships_for(student_id)

    target = next((m for m in owned if m.id == membership_id), None) or latest_membership(owned)

    if membership_id and membership_id not in {m.id for m in owned}:
        if membership_id in store.memberships:
            raise ValidationError(
                f"Membership '{membership_id}' belongs to another student",
                {"membership_id": membership_id},
            )

    if target is not None:
        merged = target.model_copy(update=fields)
        if membership_id:
            merged.id = membership_id
        return _check_membership(merged), target.id

    missing = [
        column
        for column, attr in (
            ("membership_pass_id", "pass_id"),
            ("membership_start_date", "start_date"),
            ("membership_end_date", "end_date"),
        )
        if attr not in fields
    ]
    if missing:
        raise ValidationError(
            f"New membership requires: {', '.join(missing)}", {"fields": missing}
        )

    fields.setdefault("price", store.catalog.price_of(fields["pass_id"]))
    fields.setdefault("payment_date", fields["start_date"])
    if membership_id:
        fields["id"] = membership_id

    return _check_membership(Membership(student_id=student_id, **fields)), None


def import_batch(store: StudioStore, records: Iterable[Dict[str, Any]]) -> ImportResult:
    """
    Upsert students (and at most one membership each) from flat records.

    Each record is validated and applied on its own: a rejected record is
    reported with its 1-based row number and the rest of the batch proceeds.
    """
    result = ImportResult()

    for row, record in enumerate(records, start=1):
        try:
            if not isinstance(record, dict):
                raise ValidationError("Record must be an object of fields")
            student, is_new = _plan_student(store, record)
            membership, replaced_id = _plan_membership(store, student.id, record)
        except BaseAppException as e:
            result.diagnostics.append(
                ImportDiagnostic(row=row, error=e.error_code, message=e.message, details=e.details)
            )
            logger.warning(
                f"Import row {row} rejected: {e.message}",
                extra={"row": row, "error_code": e.error_code},
            )
            continue

        store.students[student.id] = student
        if membership is not None:
            if replaced_id and replaced_id != membership.id:
                del store.memberships[replaced_id]
            store.memberships[membership.id] = membership

        if is_new:
            result.inserted_count += 1
        else:
            result.updated_count += 1

    log_business_event(
        "import_completed",
        "import",
        None,
        {
            "inserted": result.inserted_count,
            "updated": result.updated_count,
            "rejected": result.rejected_count,
        },
    )
    if result.inserted_count or result.updated_count:
        store.notify_changed(
            "import_completed",
            {"inserted": result.inserted_count, "updated": result.updated_count},
        )
    return result


def _student_columns(student: Student) -> Dict[str, str]:
    return {
        "student_id": student.id,
        "student_name": student.name,
        "student_phone": student.phone,
        "student_registration_date": student.registration_date.isoformat(),
        "student_remarks": student.remarks,
    }


def _membership_columns(membership: Optional[Membership]) -> Dict[str, str]:
    if membership is None:
        return {column: "" for column in MEMBERSHIP_FIELDS}

    def iso(value):
        return value.isoformat() if value else ""

    return {
        "membership_id": membership.id,
        "membership_pass_id": membership.pass_id,
        "membership_start_date": iso(membership.start_date),
        "membership_end_date": iso(membership.end_date),
        "membership_price": str(membership.price),
        "membership_payment_date": iso(membership.payment_date),
        "membership_payment_method": membership.payment_method.value,
        "membership_cash_receipt_issued": "true" if membership.cash_receipt_issued else "false",
        "membership_hold_start_date": iso(membership.hold_start_date),
        "membership_hold_end_date": iso(membership.hold_end_date),
    }


def export_records(store: StudioStore) -> List[Dict[str, str]]:
    """One flat record per student-membership pair, in import column order"""
    grouped = store.memberships_by_student()
    records = []

    for student in sorted(store.students.values(), key=lambda s: s.name.lower()):
        memberships = sorted(grouped.get(student.id, []), key=lambda m: m.start_date)
        for membership in memberships or [None]:
            row = {**_student_columns(student), **_membership_columns(membership)}
            records.append({column: row[column] for column in RECORD_FIELDS})

    return records
