"""Students CRUD - registry, cascade delete and status-aware queries"""
import logging
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple, Union

from app.core.exceptions import ValidationError
from app.core.logging_utils import log_business_event
from app.core.store import StudioStore
from app.core.validations import DateLike, clean_phone_number, parse_datetime
from app.studio.crud.memberships import build_membership
from app.studio.models.attendance import AttendanceRecord
from app.studio.models.memberships import Membership, PaymentMethod
from app.studio.models.students import Student
from app.studio.schemas.students import StudentFilters, StudentWithStatus
from app.studio.services.status import StudentStatus, classify

logger = logging.getLogger(__name__)

STUDENT_EDITABLE_FIELDS = {"name", "phone", "remarks"}


def _clean_name(name: Optional[str]) -> str:
    if not name or not name.strip():
        raise ValidationError("Student name is required", {"field": "name"})
    return name.strip()


def build_student(
    name: str,
    phone: str = "",
    remarks: str = "",
    registration_date: Optional[Union[datetime, DateLike]] = None,
    student_id: Optional[str] = None,
    strict_phone: bool = True,
) -> Student:
    """
    Build (but do not store) a student.

    Imported phones are kept as given (stripped); interactive entry is
    checked with ``clean_phone_number``.
    """
    phone = phone or ""
    fields: Dict[str, Any] = {
        "name": _clean_name(name),
        "phone": clean_phone_number(phone) if strict_phone else phone.strip(),
        "remarks": remarks or "",
    }
    if registration_date is not None:
        fields["registration_date"] = parse_datetime(registration_date, "registration_date")
    if student_id:
        fields["id"] = student_id
    return Student(**fields)


def create_student(
    store: StudioStore,
    name: str,
    phone: str = "",
    remarks: str = "",
) -> Student:
    student = build_student(name, phone, remarks)
    store.students[student.id] = student

    log_business_event("student_created", "student", student.id, {"name": student.name})
    store.notify_changed("student_created", {"student_id": student.id})
    return student


def register_student(
    store: StudioStore,
    name: str,
    phone: str,
    pass_id: str,
    start_date: DateLike,
    payment_date: Optional[DateLike] = None,
    payment_method: Union[PaymentMethod, str, None] = PaymentMethod.card,
    cash_receipt_issued: bool = False,
    remarks: str = "",
) -> Tuple[Student, Membership]:
    """New member flow: student and first membership are stored together or not at all"""
    student = build_student(name, phone, remarks)
    membership = build_membership(
        store,
        student.id,
        pass_id,
        start_date,
        payment_date,
        payment_method,
        cash_receipt_issued,
    )

    store.students[student.id] = student
    store.memberships[membership.id] = membership

    log_business_event(
        "student_registered",
        "student",
        student.id,
        {
            "membership_id": membership.id,
            "pass_id": membership.pass_id,
            "end_date": membership.end_date.isoformat(),
        },
    )
    store.notify_changed(
        "student_registered", {"student_id": student.id, "membership_id": membership.id}
    )
    return student, membership


def update_student(store: StudioStore, student_id: str, patch: Dict[str, Any]) -> Student:
    """Update name, phone or remarks; remarks are freely editable by staff"""
    student = store.get_student(student_id)

    unknown = set(patch) - STUDENT_EDITABLE_FIELDS
    if unknown:
        raise ValidationError(
            f"Fields cannot be edited: {', '.join(sorted(unknown))}",
            {"fields": sorted(unknown)},
        )

    updates: Dict[str, Any] = {}
    if patch.get("name") is not None:
        updates["name"] = _clean_name(patch["name"])
    if patch.get("phone") is not None:
        updates["phone"] = clean_phone_number(patch["phone"])
    if patch.get("remarks") is not None:
        updates["remarks"] = patch["remarks"]

    updated = student.model_copy(update=updates)
    store.students[student_id] = updated

    store.notify_changed("student_updated", {"student_id": student_id})
    return updated


def delete_student(store: StudioStore, student_id: str) -> Dict[str, int]:
    """Delete a student together with its memberships and attendance records"""
    store.get_student(student_id)

    membership_ids = [m.id for m in store.memberships_for(student_id)]
    attendance_ids = [a.id for a in store.attendance_for(student_id)]

    for membership_id in membership_ids:
        del store.memberships[membership_id]
    for record_id in attendance_ids:
        del store.attendance[record_id]
    del store.students[student_id]

    result = {
        "memberships_deleted": len(membership_ids),
        "attendance_deleted": len(attendance_ids),
    }
    log_business_event("student_deleted", "student", student_id, result)
    store.notify_changed("student_deleted", {"student_id": student_id})
    return result


def get_student_status(store: StudioStore, student_id: str, today: date) -> StudentStatus:
    store.get_student(student_id)
    return classify(store.memberships_for(student_id), today)


def get_student_memberships(store: StudioStore, student_id: str) -> List[Membership]:
    store.get_student(student_id)
    return sorted(store.memberships_for(student_id), key=lambda m: (m.start_date, m.end_date))


def get_student_attendance(store: StudioStore, student_id: str) -> List[AttendanceRecord]:
    store.get_student(student_id)
    return sorted(
        store.attendance_for(student_id),
        key=lambda a: (a.attendance_date, a.class_slot),
        reverse=True,
    )


def _matches_search(student: Student, search: str) -> bool:
    term = search.strip().lower()
    return term in student.name.lower() or term in student.phone.lower()


def list_students(
    store: StudioStore,
    today: date,
    skip: int = 0,
    limit: int = 50,
    filters: Optional[StudentFilters] = None,
) -> Tuple[List[StudentWithStatus], int]:
    """Students sorted by name, each with a status computed for ``today``"""
    grouped = store.memberships_by_student()

    rows = []
    for student in sorted(store.students.values(), key=lambda s: s.name.lower()):
        if filters and filters.search and not _matches_search(student, filters.search):
            continue

        status = classify(grouped.get(student.id, []), today)
        if filters and filters.status and status.status != filters.status:
            continue

        rows.append(StudentWithStatus(**student.model_dump(), status=status))

    return rows[skip : skip + limit], len(rows)
