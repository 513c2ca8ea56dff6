"""Attendance CRUD - presence toggle and class eligibility"""
import logging
from datetime import date
from typing import List, Optional, Tuple

from app.core.exceptions import ValidationError
from app.core.store import StudioStore
from app.core.validations import DateLike, parse_date
from app.studio.models.attendance import AttendanceRecord
from app.studio.models.students import Student

logger = logging.getLogger(__name__)


def toggle_attendance(
    store: StudioStore, student_id: str, attendance_date: DateLike, class_slot: str
) -> Tuple[bool, Optional[AttendanceRecord]]:
    """
    Flip the presence flag of a student for one class slot.

    Returns ``(True, record)`` when the record was created and
    ``(False, removed_record)`` when it was removed.
    """
    store.get_student(student_id)
    on = parse_date(attendance_date, "attendance_date")
    if not class_slot or not class_slot.strip():
        raise ValidationError("Class slot is required", {"field": "class_slot"})
    slot = class_slot.strip()

    existing = next(
        (a for a in store.attendance_for(student_id) if a.key == (student_id, on, slot)),
        None,
    )
    if existing:
        del store.attendance[existing.id]
        logger.info(f"Attendance removed: student={student_id} date={on} slot={slot}")
        store.notify_changed("attendance_removed", {"record_id": existing.id})
        return False, existing

    record = AttendanceRecord(student_id=student_id, attendance_date=on, class_slot=slot)
    store.attendance[record.id] = record
    logger.info(f"Attendance marked: student={student_id} date={on} slot={slot}")
    store.notify_changed("attendance_marked", {"record_id": record.id})
    return True, record


def eligible_students(store: StudioStore, on_date: date) -> List[Student]:
    """Students with a membership in force on the day and not on hold that day"""
    eligible_ids = {
        m.student_id
        for m in store.memberships.values()
        if m.covers(on_date) and not m.is_holding(on_date)
    }
    return sorted(
        (s for s in store.students.values() if s.id in eligible_ids),
        key=lambda s: s.name.lower(),
    )
