"""Membership Model - a purchased, dated access window"""
from datetime import date
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from app.studio.models.students import new_id


class PaymentMethod(str, Enum):
    """Способ оплаты"""
    card = "card"
    cash = "cash"


class Membership(BaseModel):
    """Абонемент студента"""
    id: str = Field(default_factory=new_id)

    # Внешний ключ на Student
    student_id: str

    pass_id: str

    # Даты абонемента (end_date вычисляется, хранится денормализованно)
    start_date: date
    end_date: date

    # Снимок цены из каталога на момент создания/изменения
    price: int = 0

    # Оплата
    payment_date: date
    payment_method: PaymentMethod = PaymentMethod.card
    cash_receipt_issued: bool = False

    # Заморозка (оба поля заданы или оба пустые)
    hold_start_date: Optional[date] = None
    hold_end_date: Optional[date] = None

    @property
    def has_hold(self) -> bool:
        return self.hold_start_date is not None and self.hold_end_date is not None

    def is_holding(self, on: date) -> bool:
        """Hold interval covers the given day"""
        return self.has_hold and self.hold_start_date <= on <= self.hold_end_date

    def covers(self, on: date) -> bool:
        return self.start_date <= on <= self.end_date

    def __repr__(self):
        return (
            f"<Membership(id='{self.id}', student_id='{self.student_id}', "
            f"pass_id='{self.pass_id}', {self.start_date}..{self.end_date})>"
        )
