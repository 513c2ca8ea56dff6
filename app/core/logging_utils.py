"""
Логирование: консольный вывод (text/json), бизнес-события и учет ошибок
"""

import json
import logging
import time
from collections import Counter, deque
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Атрибуты LogRecord, которые не считаются полями extra
_RECORD_ATTRS = set(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """Одна JSON строка на запись; поля extra выводятся на верхнем уровне"""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in vars(record).items():
            if key not in _RECORD_ATTRS:
                entry[key] = value
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


def setup_logging(log_level: str = "INFO", log_format: str = "text"):
    """Заменяет обработчики корневого логгера одним консольным"""
    handler = logging.StreamHandler()
    handler.setFormatter(
        JsonFormatter() if log_format.lower() == "json" else logging.Formatter(TEXT_FORMAT)
    )

    root = logging.getLogger()
    root.setLevel(log_level.upper())
    root.handlers[:] = [handler]

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logger.info(f"Logging configured: level={log_level}, format={log_format}")


class ErrorTracker:
    """Счетчики ошибок по типу и последние ошибки (для /health)"""

    def __init__(self, max_history: int = 100):
        self.counts: Counter = Counter()
        self.recent: deque = deque(maxlen=max_history)

    def track_error(
        self, error_type: str, error_message: str, context: Optional[Dict[str, Any]] = None
    ):
        self.counts[error_type] += 1
        self.recent.append(
            {
                "timestamp": time.time(),
                "type": error_type,
                "message": error_message,
                "context": context or {},
            }
        )
        logger.warning(
            f"Error tracked: {error_type}",
            extra={"error_type": error_type, "total_count": self.counts[error_type]},
        )

    def get_stats(self) -> Dict[str, Any]:
        return {
            "error_counts": dict(self.counts),
            "total_errors": sum(self.counts.values()),
            "last_errors": list(self.recent)[-10:],
        }


error_tracker = ErrorTracker()


def log_business_event(
    event: str, entity_type: str, entity_id: Any, details: Optional[Dict[str, Any]] = None
):
    """
    Логировать бизнес-событие

    Args:
        event: Название события (membership_created, import_completed, ...)
        entity_type: Тип сущности (student, membership, import, system)
        entity_id: ID сущности или None для пакетных операций
        details: Дополнительные детали
    """
    logger.info(
        f"Business event: {event}",
        extra={
            "event": event,
            "entity_type": entity_type,
            "entity_id": entity_id,
            "details": details or {},
            "category": "business_event",
        },
    )
