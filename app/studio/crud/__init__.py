"""Studio CRUD Package"""
from .memberships import (
    create_membership,
    renew_membership,
    update_membership,
    bulk_extend,
)

from .students import (
    create_student,
    register_student,
    update_student,
    delete_student,
    get_student_status,
    get_student_memberships,
    get_student_attendance,
    list_students,
)

from .imports import (
    import_batch,
    export_records,
)

from .attendance import (
    toggle_attendance,
    eligible_students,
)

from .analytics import (
    get_dashboard_summary,
    get_attendance_summary,
    get_revenue_by_period,
    get_financial_report,
)

__all__ = [
    # Memberships
    "create_membership",
    "renew_membership",
    "update_membership",
    "bulk_extend",
    # Students
    "create_student",
    "register_student",
    "update_student",
    "delete_student",
    "get_student_status",
    "get_student_memberships",
    "get_student_attendance",
    "list_students",
    # Import/Export
    "import_batch",
    "export_records",
    # Attendance
    "toggle_attendance",
    "eligible_students",
    # Analytics
    "get_dashboard_summary",
    "get_attendance_summary",
    "get_revenue_by_period",
    "get_financial_report",
]
