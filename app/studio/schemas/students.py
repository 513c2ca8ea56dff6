"""Students Schemas - studio members and their derived status"""
from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime

from app.core.exceptions import ValidationError
from app.studio.models.memberships import PaymentMethod
from app.studio.services.status import StatusTag, StudentStatus


class StudentCreate(BaseModel):
    """Схема для создания студента"""
    name: str = Field(..., min_length=1, max_length=100, description="Student name")
    phone: str = Field("", max_length=30, description="Contact phone")
    remarks: str = Field("", max_length=5000)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValidationError("Student name cannot be empty")
        return v.strip()


class StudentUpdate(BaseModel):
    """Схема для обновления студента (только переданные поля)"""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    phone: Optional[str] = Field(None, max_length=30)
    remarks: Optional[str] = Field(None, max_length=5000)


class StudentRead(BaseModel):
    """Информация о студенте"""
    id: str
    name: str
    phone: str = ""
    registration_date: datetime
    remarks: str = ""

    class Config:
        from_attributes = True


class StudentWithStatus(StudentRead):
    """Студент с вычисленным статусом абонемента"""
    status: StudentStatus


class StudentFilters(BaseModel):
    """Фильтры для списка студентов"""
    search: Optional[str] = Field(None, description="Search by name or phone")
    status: Optional[StatusTag] = Field(None, description="Filter by derived status")


class StudentListResponse(BaseModel):
    """Ответ со списком студентов"""
    students: List[StudentWithStatus]
    total: int
    page: int
    size: int
    pages: int
    filters: Optional[StudentFilters] = None


class StudentRegisterRequest(BaseModel):
    """Регистрация нового студента вместе с первым абонементом"""
    student: StudentCreate
    pass_id: str
    start_date: str = Field(..., description="ISO date")
    payment_date: Optional[str] = None
    payment_method: PaymentMethod = PaymentMethod.card
    cash_receipt_issued: bool = False

    class Config:
        json_schema_extra = {
            "example": {
                "student": {"name": "Kim Minji", "phone": "010-1234-5678"},
                "pass_id": "monthly_3x",
                "start_date": "2024-01-31",
                "payment_method": "card",
            }
        }
