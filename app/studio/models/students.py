"""Student Model - studio member"""
import uuid
from datetime import datetime

from pydantic import BaseModel, Field


def new_id() -> str:
    return uuid.uuid4().hex


class Student(BaseModel):
    """Член студии"""
    id: str = Field(default_factory=new_id)
    name: str
    phone: str = ""

    # Устанавливается при создании, автоматически не меняется
    registration_date: datetime = Field(default_factory=datetime.now)

    # Автоматические процессы только дописывают строки
    remarks: str = ""

    def append_remark(self, line: str) -> None:
        self.remarks = f"{self.remarks}\n{line}" if self.remarks else line

    def __repr__(self):
        return f"<Student(id='{self.id}', name='{self.name}')>"
