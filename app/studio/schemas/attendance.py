"""Attendance Schemas"""
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import date

from app.studio.schemas.students import StudentRead


class AttendanceToggleRequest(BaseModel):
    """Отметить/снять отметку посещения"""
    student_id: str
    attendance_date: date
    class_slot: str = Field(..., min_length=1, max_length=50, description="e.g. 'mon-19:00'")


class AttendanceRecordRead(BaseModel):
    id: str
    student_id: str
    attendance_date: date
    class_slot: str

    class Config:
        from_attributes = True


class AttendanceToggleResponse(BaseModel):
    present: bool
    record: Optional[AttendanceRecordRead] = None


class AttendanceListResponse(BaseModel):
    records: List[AttendanceRecordRead]
    total: int


class EligibleStudentsResponse(BaseModel):
    """Студенты, которые могут посещать занятия в указанный день"""
    on_date: date
    students: List[StudentRead]
    total: int
