import time
import logging
import uuid
from typing import Callable, List, Optional
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from app.core.logging_utils import error_tracker

logger = logging.getLogger(__name__)

DEFAULT_EXCLUDE_PATHS = ["/health", "/docs", "/openapi.json", "/redoc"]


def client_ip(request: Request) -> str:
    """IP клиента с учетом прокси"""
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Логирование запросов с измерением времени выполнения.

    Каждому запросу присваивается короткий request_id, который возвращается
    в заголовке X-Request-ID. Запросы дольше slow_request_threshold секунд
    логируются с уровнем WARNING.
    """

    def __init__(
        self,
        app: ASGIApp,
        exclude_paths: Optional[List[str]] = None,
        slow_request_threshold: float = 1.0,
    ):
        super().__init__(app)
        self.exclude_paths = exclude_paths or DEFAULT_EXCLUDE_PATHS
        self.slow_request_threshold = slow_request_threshold

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in self.exclude_paths:
            return await call_next(request)

        request_id = uuid.uuid4().hex[:8]
        request.state.request_id = request_id
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                f"Request failed: {request.method} {request.url.path}",
                extra={
                    "request_id": request_id,
                    "method": request.method,
                    "path": request.url.path,
                    "duration_ms": round((time.perf_counter() - started) * 1000, 2),
                    "error_type": type(e).__name__,
                },
            )
            raise

        duration = time.perf_counter() - started
        level = logging.WARNING if duration > self.slow_request_threshold else logging.INFO
        logger.log(
            level,
            f"{request.method} {request.url.path} -> {response.status_code}",
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": round(duration * 1000, 2),
                "client_ip": client_ip(request),
            },
        )

        response.headers["X-Request-ID"] = request_id
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Базовые security headers для JSON API"""

    HEADERS = {
        "X-Content-Type-Options": "nosniff",
        "X-Frame-Options": "DENY",
        "Referrer-Policy": "strict-origin-when-cross-origin",
    }

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)
        for name, value in self.HEADERS.items():
            response.headers.setdefault(name, value)
        return response


class ErrorTrackingMiddleware(BaseHTTPMiddleware):
    """Учет ответов с ошибками (4xx, 5xx) и необработанных исключений"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        context = {"method": request.method, "path": request.url.path}
        try:
            response = await call_next(request)
        except Exception as e:
            error_tracker.track_error(f"UNHANDLED_{type(e).__name__}", str(e), context)
            raise

        if response.status_code >= 400:
            error_tracker.track_error(
                f"HTTP_{response.status_code}",
                f"HTTP {response.status_code} response",
                {**context, "status_code": response.status_code},
            )
        return response


def setup_middleware(app, config: dict = None):
    """
    Настройка middleware приложения

    Args:
        app: FastAPI приложение
        config: slow_request_threshold, exclude_paths
    """
    config = config or {}

    # Middleware применяются в обратном порядке добавления
    app.add_middleware(ErrorTrackingMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        RequestLoggingMiddleware,
        exclude_paths=config.get("exclude_paths", DEFAULT_EXCLUDE_PATHS),
        slow_request_threshold=config.get("slow_request_threshold", 1.0),
    )

    logger.info("Middleware configured")
