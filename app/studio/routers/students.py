"""Students Router - registry, status and per-student history"""
import math
from datetime import date
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, Request, status

from app.core.dependencies import get_store, get_today
from app.core.limits import limiter
from app.core.store import StudioStore
from app.studio.crud.students import (
    create_student,
    delete_student,
    get_student_attendance,
    get_student_memberships,
    get_student_status,
    list_students,
    register_student,
    update_student,
)
from app.studio.schemas.attendance import AttendanceListResponse, AttendanceRecordRead
from app.studio.schemas.memberships import MembershipListResponse, MembershipRead
from app.studio.schemas.students import (
    StudentCreate,
    StudentFilters,
    StudentListResponse,
    StudentRead,
    StudentRegisterRequest,
    StudentUpdate,
    StudentWithStatus,
)
from app.studio.services.status import StatusTag, StudentStatus

router = APIRouter(prefix="/students", tags=["Students"])


@router.get("/", response_model=StudentListResponse)
@limiter.limit("60/minute")
async def get_students_list(
    request: Request,
    page: int = Query(1, ge=1, description="Page number starting from 1"),
    size: int = Query(50, ge=1, le=200, description="Number of items per page"),
    search: Optional[str] = Query(None, description="Search by name or phone"),
    status: Optional[StatusTag] = Query(None, description="Filter by derived status"),
    store: StudioStore = Depends(get_store),
    today: date = Depends(get_today),
):
    """
    Get students with their membership status computed for today.

    Status is derived on every request and never stored.
    """
    filters = StudentFilters(search=search, status=status)
    skip = (page - 1) * size

    students, total = list_students(
        store,
        today,
        skip=skip,
        limit=size,
        filters=filters if any([search, status]) else None,
    )
    pages = math.ceil(total / size) if total > 0 else 1

    return StudentListResponse(
        students=students,
        total=total,
        page=page,
        size=size,
        pages=pages,
        filters=filters,
    )


@router.post("/", response_model=StudentRead, status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
async def create_new_student(
    request: Request,
    body: StudentCreate,
    store: StudioStore = Depends(get_store),
):
    """Create a student without a membership."""
    return create_student(store, body.name, body.phone, body.remarks)


@router.post("/register", status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
async def register_new_student(
    request: Request,
    body: StudentRegisterRequest,
    store: StudioStore = Depends(get_store),
) -> Dict[str, Any]:
    """Register a new member together with the first membership."""
    student, membership = register_student(
        store,
        body.student.name,
        body.student.phone,
        body.pass_id,
        body.start_date,
        body.payment_date,
        body.payment_method,
        body.cash_receipt_issued,
        body.student.remarks,
    )
    return {
        "student": StudentRead.model_validate(student),
        "membership": MembershipRead.model_validate(membership),
    }


@router.get("/{student_id}", response_model=StudentWithStatus)
@limiter.limit("60/minute")
async def get_student(
    request: Request,
    student_id: str,
    store: StudioStore = Depends(get_store),
    today: date = Depends(get_today),
):
    """Get a student with the current status."""
    student_status = get_student_status(store, student_id, today)
    return StudentWithStatus(**store.get_student(student_id).model_dump(), status=student_status)


@router.get("/{student_id}/status", response_model=StudentStatus)
@limiter.limit("60/minute")
async def get_student_current_status(
    request: Request,
    student_id: str,
    store: StudioStore = Depends(get_store),
    today: date = Depends(get_today),
):
    """Representative membership, status tag and combined coverage end."""
    return get_student_status(store, student_id, today)


@router.patch("/{student_id}", response_model=StudentRead)
@limiter.limit("30/minute")
async def update_student_info(
    request: Request,
    student_id: str,
    body: StudentUpdate,
    store: StudioStore = Depends(get_store),
):
    """Update name, phone or remarks."""
    return update_student(store, student_id, body.model_dump(exclude_unset=True))


@router.delete("/{student_id}")
@limiter.limit("10/minute")
async def delete_student_and_history(
    request: Request,
    student_id: str,
    store: StudioStore = Depends(get_store),
) -> Dict[str, Any]:
    """
    Delete a student.

    All memberships and attendance records of the student are deleted too.
    """
    result = delete_student(store, student_id)
    return {"student_id": student_id, **result}


@router.get("/{student_id}/memberships", response_model=MembershipListResponse)
@limiter.limit("60/minute")
async def get_memberships_of_student(
    request: Request,
    student_id: str,
    store: StudioStore = Depends(get_store),
):
    """All memberships of a student, renewals included."""
    memberships = get_student_memberships(store, student_id)
    return MembershipListResponse(
        memberships=[MembershipRead.model_validate(m) for m in memberships],
        total=len(memberships),
    )


@router.get("/{student_id}/attendance", response_model=AttendanceListResponse)
@limiter.limit("60/minute")
async def get_attendance_of_student(
    request: Request,
    student_id: str,
    store: StudioStore = Depends(get_store),
):
    """Attendance records of a student, newest first."""
    records = get_student_attendance(store, student_id)
    return AttendanceListResponse(
        records=[AttendanceRecordRead.model_validate(r) for r in records],
        total=len(records),
    )
