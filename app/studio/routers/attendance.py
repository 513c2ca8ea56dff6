"""Attendance Router"""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from app.core.dependencies import get_store, get_today
from app.core.limits import limiter
from app.core.store import StudioStore
from app.studio.crud.attendance import eligible_students, toggle_attendance
from app.studio.schemas.attendance import (
    AttendanceRecordRead,
    AttendanceToggleRequest,
    AttendanceToggleResponse,
    EligibleStudentsResponse,
)
from app.studio.schemas.students import StudentRead

router = APIRouter(prefix="/attendance", tags=["Attendance"])


@router.post("/toggle", response_model=AttendanceToggleResponse)
@limiter.limit("120/minute")
async def toggle_student_attendance(
    request: Request,
    body: AttendanceToggleRequest,
    store: StudioStore = Depends(get_store),
):
    """Mark a student present for a class slot, or remove the mark if set."""
    present, record = toggle_attendance(
        store, body.student_id, body.attendance_date, body.class_slot
    )
    return AttendanceToggleResponse(
        present=present,
        record=AttendanceRecordRead.model_validate(record) if present else None,
    )


@router.get("/eligible", response_model=EligibleStudentsResponse)
@limiter.limit("60/minute")
async def get_eligible_students(
    request: Request,
    on_date: Optional[date] = Query(None, description="Defaults to today"),
    store: StudioStore = Depends(get_store),
    today: date = Depends(get_today),
):
    """Students whose membership covers the day and who are not on hold."""
    day = on_date or today
    students = eligible_students(store, day)
    return EligibleStudentsResponse(
        on_date=day,
        students=[StudentRead.model_validate(s) for s in students],
        total=len(students),
    )
