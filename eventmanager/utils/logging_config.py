import json
import logging
import logging.config
import uuid
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel

from eventmanager.utils.settings import EventManagerSettings

# LogRecord attributes that are not copied into the JSON output as extras
_RESERVED_ATTRS = frozenset(
    [
        "timestamp",
        "level",
        "message",
        "logger",
        "request_id",
        "req_id",
        "exc_info",
        "extra",
        "args",
        "exc_text",
        "stack_info",
        "created",
        "msecs",
        "relativeCreated",
        "levelno",
        "levelname",
        "msg",
        "name",
        "pathname",
        "filename",
        "module",
        "lineno",
        "funcName",
        "processName",
        "process",
        "threadName",
        "thread",
        "taskName",
    ]
)


class JSONFormatter(logging.Formatter):
    def __init__(self) -> None:
        super().__init__()

    def _serialize_object(self, obj: Any) -> Any:
        if isinstance(obj, BaseModel):
            return obj.model_dump()
        if isinstance(obj, datetime):
            return obj.isoformat()
        if isinstance(obj, Enum):
            return obj.name
        if isinstance(obj, Exception):
            return str(obj)
        if isinstance(obj, (list, dict, str, int, float, bool)) or obj is None:
            return obj
        return str(obj)

    def format(self, record: logging.LogRecord) -> str:
        log_record = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "request_id": getattr(record, "req_id", None) or generate_request_id(),
        }

        # Add any exception info
        if record.exc_info:
            log_record["exc_info"] = self.formatException(record.exc_info)

        # Fields passed through ``extra=``
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_record[key] = self._serialize_object(value)

        return json.dumps(log_record, default=self._serialize_object)


def generate_request_id() -> str:
    return str(uuid.uuid4())


def setup_logging(settings: EventManagerSettings | None = None) -> None:
    """Configure logging for the host application.

    The library itself never calls this; it only logs through named loggers.
    """
    settings = settings or EventManagerSettings.from_env()

    handlers: dict[str, dict[str, Any]] = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "json",
            "stream": "ext://sys.stdout",
        },
    }
    if settings.log_file is not None:
        settings.log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers["file"] = {
            "class": "logging.FileHandler",
            "formatter": "json",
            "filename": str(settings.log_file),
            "mode": "a",
        }

    logging_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "()": "eventmanager.utils.logging_config.JSONFormatter",
            }
        },
        "handlers": handlers,
        "root": {
            "level": settings.log_level,
            "handlers": list(handlers),
        },
    }

    root = logging.getLogger()
    root.handlers = []  # Remove any existing handlers

    logging.config.dictConfig(logging_config)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance.

    This will return a logger that inherits settings from the root logger,
    including log level and handlers.
    """
    return logging.getLogger(name)
