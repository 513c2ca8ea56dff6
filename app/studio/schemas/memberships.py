"""Memberships Schemas - create, renew, edit and bulk extension"""
from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import date

from app.studio.models.memberships import PaymentMethod


class MembershipPurchase(BaseModel):
    """
    Покупка абонемента (новый или повторная регистрация).

    Dates are ISO strings (a bare date or a full timestamp); an unparseable
    value is rejected as INVALID_DATE by the lifecycle operations.
    """
    student_id: str
    pass_id: str
    start_date: str = Field(..., description="ISO date, e.g. 2024-03-25")
    payment_date: Optional[str] = Field(None, description="Defaults to start date")
    payment_method: PaymentMethod = PaymentMethod.card
    cash_receipt_issued: bool = False

    class Config:
        json_schema_extra = {
            "example": {
                "student_id": "4f0c2f9a1b2c4d5e8f9a0b1c2d3e4f5a",
                "pass_id": "quarterly_3x",
                "start_date": "2024-03-25",
                "payment_date": "2024-03-20",
                "payment_method": "cash",
                "cash_receipt_issued": True,
            }
        }


class MembershipUpdate(BaseModel):
    """
    Изменение абонемента. Учитываются только переданные поля.

    A hold is (re)applied only when both hold dates are sent.
    """
    pass_id: Optional[str] = None
    start_date: Optional[str] = None
    payment_date: Optional[str] = None
    payment_method: Optional[PaymentMethod] = None
    cash_receipt_issued: Optional[bool] = None
    hold_start_date: Optional[str] = None
    hold_end_date: Optional[str] = None


class MembershipRead(BaseModel):
    """Информация об абонементе"""
    id: str
    student_id: str
    pass_id: str
    start_date: date
    end_date: date
    price: int
    payment_date: date
    payment_method: PaymentMethod
    cash_receipt_issued: bool = False
    hold_start_date: Optional[date] = None
    hold_end_date: Optional[date] = None

    class Config:
        from_attributes = True


class MembershipListResponse(BaseModel):
    """Response with list of memberships"""
    memberships: List[MembershipRead]
    total: int


class BulkExtendRequest(BaseModel):
    """Массовое продление всех активных абонементов"""
    days: int = Field(..., gt=0, le=365, description="Number of days to extend")
    reason: str = Field(..., min_length=1, max_length=200)

    class Config:
        json_schema_extra = {"example": {"days": 3, "reason": "holiday"}}


class BulkExtendResponse(BaseModel):
    """Результат массового продления"""
    affected_students: int = 0
    affected_memberships: int = 0
    student_ids: List[str] = []
    days: int
    reason: str
