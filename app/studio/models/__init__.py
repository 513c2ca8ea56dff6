from .passes import DurationUnit, PassDuration, PassDefinition, PassCatalog, DEFAULT_PASSES
from .students import Student, new_id
from .memberships import Membership, PaymentMethod
from .attendance import AttendanceRecord

__all__ = [
    "DurationUnit",
    "PassDuration",
    "PassDefinition",
    "PassCatalog",
    "DEFAULT_PASSES",
    "Student",
    "new_id",
    "Membership",
    "PaymentMethod",
    "AttendanceRecord",
]
