from datetime import date

from pydantic import BaseModel, Field

from app.studio.models.students import new_id


class AttendanceRecord(BaseModel):
    """Отметка посещения занятия (флаг присутствия, не счетчик)"""
    id: str = Field(default_factory=new_id)
    student_id: str
    attendance_date: date
    class_slot: str

    @property
    def key(self):
        return (self.student_id, self.attendance_date, self.class_slot)
