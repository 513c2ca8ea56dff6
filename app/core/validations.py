import math
import re
from datetime import date, datetime
from typing import Any, Optional, Union

from app.core.exceptions import InvalidDateError, ValidationError

DateLike = Union[date, datetime, str]

_TRUE_VALUES = {"true", "1", "yes", "y"}
_FALSE_VALUES = {"false", "0", "no", "n"}


def clean_phone_number(phone: str) -> str:
    """
    Очищает номер телефона: оставляет цифры, сохраняя ведущий '+'.
    Пустая строка допустима (телефон не обязателен).
    """
    if not phone or not phone.strip():
        return ""

    phone = phone.strip()
    digits = re.sub(r"\D", "", phone)

    if not digits:
        raise ValidationError("Phone number must contain digits")

    if len(digits) < 7 or len(digits) > 20:
        raise ValidationError("Phone number must be between 7 and 20 digits")

    # Форматирование (дефисы, пробелы) сохраняем как ввел пользователь
    if not re.match(r"^\+?[\d\s\-()]+$", phone):
        raise ValidationError("Phone number contains invalid characters")

    return phone


def parse_date(value: DateLike, field: str = "date") -> date:
    """
    Приводит значение к календарной дате.

    Accepts ``date``, ``datetime`` (time of day is dropped) and ISO strings,
    either a bare ``YYYY-MM-DD`` or a full timestamp.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise InvalidDateError(field, value)

    text = value.strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        # "2024-03-01T00:00:00.000Z" and similar
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        raise InvalidDateError(field, value)


def parse_optional_date(value: Optional[DateLike], field: str) -> Optional[date]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return parse_date(value, field)


def parse_datetime(value: Union[datetime, date, str], field: str = "datetime") -> datetime:
    """Приводит значение к datetime (дата без времени - полночь)"""
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not isinstance(value, str) or not value.strip():
        raise InvalidDateError(field, value)
    try:
        return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return datetime.combine(parse_date(value, field), datetime.min.time())


def parse_price(value: Any, field: str = "price") -> int:
    """Цена - целое число без дробной части"""
    if isinstance(value, bool):
        raise ValidationError(f"Field '{field}' must be numeric", {"field": field})
    text = value if isinstance(value, (int, float)) else str(value).strip().replace(",", "")
    try:
        number = float(text)
    except (ValueError, OverflowError):
        raise ValidationError(
            f"Field '{field}' must be numeric, got '{value}'",
            {"field": field, "value": str(value)},
        )
    if not math.isfinite(number):
        raise ValidationError(
            f"Field '{field}' must be a finite number, got '{value}'",
            {"field": field, "value": str(value)},
        )
    if number < 0:
        raise ValidationError(
            f"Field '{field}' cannot be negative", {"field": field, "value": number}
        )
    return int(round(number))


def parse_bool(value: Any, field: str) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES or text == "":
        return False
    raise ValidationError(
        f"Field '{field}' must be a boolean, got '{value}'",
        {"field": field, "value": str(value)},
    )
