"""Import/Export Schemas - flat student + membership records"""
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional


# Порядок колонок при экспорте; импорт принимает те же ключи
STUDENT_FIELDS = [
    "student_id",
    "student_name",
    "student_phone",
    "student_registration_date",
    "student_remarks",
]

MEMBERSHIP_FIELDS = [
    "membership_id",
    "membership_pass_id",
    "membership_start_date",
    "membership_end_date",
    "membership_price",
    "membership_payment_date",
    "membership_payment_method",
    "membership_cash_receipt_issued",
    "membership_hold_start_date",
    "membership_hold_end_date",
]

RECORD_FIELDS = STUDENT_FIELDS + MEMBERSHIP_FIELDS


class ImportBatchRequest(BaseModel):
    """Пакет записей для импорта"""
    records: List[Dict[str, Any]] = Field(..., description="Flat records keyed by field name")

    class Config:
        json_schema_extra = {
            "example": {
                "records": [
                    {
                        "student_id": "s-001",
                        "student_name": "Kim Minji",
                        "student_phone": "010-1234-5678",
                        "membership_pass_id": "monthly_3x",
                        "membership_start_date": "2024-03-01",
                        "membership_end_date": "2024-03-31",
                        "membership_price": "170000",
                        "membership_payment_method": "card",
                    }
                ]
            }
        }


class ImportDiagnostic(BaseModel):
    """Причина отклонения одной записи"""
    row: int = Field(..., description="1-based position of the record in the batch")
    error: str
    message: str
    details: Dict[str, Any] = {}


class ImportResult(BaseModel):
    """Итог импорта"""
    inserted_count: int = 0
    updated_count: int = 0
    diagnostics: List[ImportDiagnostic] = []

    @property
    def rejected_count(self) -> int:
        return len(self.diagnostics)


class ExportResponse(BaseModel):
    fields: List[str] = RECORD_FIELDS
    records: List[Dict[str, Optional[str]]]
    total: int
