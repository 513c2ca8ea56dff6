"""
Централизованные обработчики ошибок для FastAPI

Все ответы об ошибках имеют одну форму:
``{"error": CODE, "message": str, "details": {...}, "path": str}``.
"""

import json
import logging
import traceback
from typing import Any, Dict, List, Union
from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import DEBUG
from app.core.exceptions import BaseAppException

logger = logging.getLogger(__name__)


def error_body(request: Request, error: str, message: str, details: Dict[str, Any] = None):
    return {
        "error": error,
        "message": message,
        "details": details or {},
        "path": request.url.path,
    }


async def app_exception_handler(
    request: Request, exc: BaseAppException
) -> JSONResponse:
    """Исключения приложения: доменные ошибки отдаются клиенту как есть"""

    log_level = logging.WARNING if exc.status_code < 500 else logging.ERROR
    logger.log(
        log_level,
        f"App exception: {exc.error_code} - {exc.message}",
        extra={
            "error_code": exc.error_code,
            "status_code": exc.status_code,
            "details": exc.details,
            "path": request.url.path,
            "method": request.method,
        },
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(request, exc.error_code, exc.message, exc.details),
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    logger.warning(
        f"HTTP exception: {exc.status_code} - {exc.detail}",
        extra={"status_code": exc.status_code, "path": request.url.path},
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(request, "HTTP_ERROR", str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


def _safe_input(value: Any) -> Any:
    """Значение поля, пригодное для JSON ответа"""
    if value is None:
        return None
    try:
        json.dumps(value)
        return value
    except (TypeError, ValueError):
        return str(value)


def format_validation_errors(errors: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [
        {
            "field": " -> ".join(str(loc) for loc in error.get("loc", [])),
            "message": error.get("msg", "Validation error"),
            "type": error.get("type", "value_error"),
            "input": _safe_input(error.get("input")),
        }
        for error in errors
    ]


async def validation_exception_handler(
    request: Request, exc: Union[RequestValidationError, PydanticValidationError]
) -> JSONResponse:
    """Ошибки валидации тела/параметров запроса"""

    formatted_errors = format_validation_errors(exc.errors())

    logger.warning(
        f"Validation error: {len(formatted_errors)} field(s)",
        extra={"errors": formatted_errors, "path": request.url.path},
    )

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=error_body(
            request,
            "VALIDATION_ERROR",
            f"Validation failed for {len(formatted_errors)} field(s)",
            {"fields": formatted_errors},
        ),
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Все остальные исключения"""

    logger.error(
        f"Unhandled exception: {type(exc).__name__} - {str(exc)}",
        exc_info=exc,
        extra={"path": request.url.path, "method": request.method},
    )

    # В production не показываем детали ошибки
    details = {}
    if DEBUG:
        details = {
            "exception_type": type(exc).__name__,
            "traceback": "".join(traceback.format_exception(exc)),
        }

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body(
            request, "INTERNAL_SERVER_ERROR", "An unexpected error occurred", details
        ),
    )


def setup_exception_handlers(app):
    """Регистрация всех обработчиков исключений"""

    app.add_exception_handler(BaseAppException, app_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(PydanticValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    logger.info("Exception handlers registered successfully")
