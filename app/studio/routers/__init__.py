"""Studio Routers Package"""
from .students import router as students_router
from .memberships import router as memberships_router
from .imports import router as imports_router
from .attendance import router as attendance_router
from .analytics import router as analytics_router
from .passes import router as passes_router

__all__ = [
    "students_router",
    "memberships_router",
    "imports_router",
    "attendance_router",
    "analytics_router",
    "passes_router",
]
