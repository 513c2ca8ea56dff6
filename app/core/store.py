"""
Хранилище студии: студенты, абонементы и посещения в памяти процесса.

Every table is a dict keyed by id with explicit foreign keys. The store is
created once at startup and mutated only through the CRUD operations; after
each successful mutation registered change listeners are notified (durable
persistence lives behind such a listener).
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from app.core.exceptions import NotFoundError
from app.studio.models import AttendanceRecord, Membership, PassCatalog, Student

logger = logging.getLogger(__name__)

ChangeListener = Callable[[str, Dict[str, Any]], None]


class StudioStore:
    """Единственный владелец изменяемых коллекций приложения"""

    def __init__(self, catalog: PassCatalog):
        self.catalog = catalog
        self.students: Dict[str, Student] = {}
        self.memberships: Dict[str, Membership] = {}
        self.attendance: Dict[str, AttendanceRecord] = {}
        self._listeners: List[ChangeListener] = []

    # === Чтение ===
    def get_student(self, student_id: str) -> Student:
        student = self.students.get(student_id)
        if not student:
            raise NotFoundError("Student", student_id)
        return student

    def get_membership(self, membership_id: str) -> Membership:
        membership = self.memberships.get(membership_id)
        if not membership:
            raise NotFoundError("Membership", membership_id)
        return membership

    def memberships_for(self, student_id: str) -> List[Membership]:
        return [m for m in self.memberships.values() if m.student_id == student_id]

    def attendance_for(self, student_id: str) -> List[AttendanceRecord]:
        return [a for a in self.attendance.values() if a.student_id == student_id]

    def memberships_by_student(self) -> Dict[str, List[Membership]]:
        grouped: Dict[str, List[Membership]] = {sid: [] for sid in self.students}
        for membership in self.memberships.values():
            grouped.setdefault(membership.student_id, []).append(membership)
        return grouped

    # === Уведомления об изменениях ===
    def subscribe(self, listener: ChangeListener) -> None:
        self._listeners.append(listener)

    def notify_changed(self, operation: str, details: Optional[Dict[str, Any]] = None):
        """Fire-and-forget notification after a completed mutation"""
        for listener in self._listeners:
            try:
                listener(operation, details or {})
            except Exception as e:
                logger.error(
                    f"Store change listener failed for {operation}: {e}",
                    exc_info=True,
                    extra={"operation": operation},
                )

    def __repr__(self):
        return (
            f"<StudioStore(students={len(self.students)}, "
            f"memberships={len(self.memberships)}, attendance={len(self.attendance)})>"
        )
