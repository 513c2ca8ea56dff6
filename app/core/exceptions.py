"""
Пользовательские исключения для централизованной обработки ошибок
"""

from typing import Optional, Dict, Any


class BaseAppException(Exception):
    """Базовое исключение приложения"""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)


# === Ошибки валидации ===
class ValidationError(BaseAppException):
    """Ошибка валидации данных"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, 400, "VALIDATION_ERROR", details)


class InvalidDateError(BaseAppException):
    """Дата не может быть разобрана"""

    def __init__(self, field: str, value: Any):
        message = f"Field '{field}' has an unparseable date value '{value}'"
        details = {"field": field, "value": str(value)}
        super().__init__(message, 400, "INVALID_DATE", details)


# === Ошибки каталога абонементов ===
class UnknownPassError(BaseAppException):
    """Абонемент не зарегистрирован в каталоге"""

    def __init__(self, pass_id: str):
        message = f"Pass '{pass_id}' is not registered in the catalog"
        details = {"pass_id": pass_id}
        super().__init__(message, 400, "UNKNOWN_PASS", details)


# === Ошибки ресурсов ===
class NotFoundError(BaseAppException):
    """Ресурс не найден"""

    def __init__(self, resource: str, identifier: str = None):
        if identifier:
            message = f"{resource} with identifier '{identifier}' not found"
            details = {"resource": resource, "identifier": identifier}
        else:
            message = f"{resource} not found"
            details = {"resource": resource}
        super().__init__(message, 404, "NOT_FOUND", details)


# === Ошибки конфигурации ===
class ConfigurationError(BaseAppException):
    """Ошибка конфигурации"""

    def __init__(self, parameter: str, message: str = None):
        message = (
            message or f"Configuration parameter '{parameter}' is invalid or missing"
        )
        details = {"parameter": parameter}
        super().__init__(message, 500, "CONFIGURATION_ERROR", details)
