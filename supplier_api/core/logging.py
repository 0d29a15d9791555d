"""Structured JSON logging.

Every record carries the service name, the id of the request being served
(when there is one) and whatever ``extra`` the caller attached, with
credential-bearing keys masked.
"""

from __future__ import annotations

import json
import logging
import logging.config
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any

from supplier_api.core.config import settings

_STANDARD_ATTRS = set(logging.makeLogRecord({}).__dict__.keys())
_REDACTED_KEYS = {"password", "confirm_password", "hashed_password", "access_token", "authorization", "token"}
REDACTED = "***"

request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)


def redact(value: Any) -> Any:
    if isinstance(value, dict):
        return {
            key: REDACTED if str(key).lower() in _REDACTED_KEYS else redact(item)
            for key, item in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [redact(item) for item in value]
    return value


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        message: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "service": settings.PROJECT_NAME,
            "environment": settings.ENVIRONMENT,
            "message": record.getMessage(),
        }
        request_id = request_id_var.get()
        if request_id:
            message["request_id"] = request_id
        if record.exc_info:
            message["exc_info"] = self.formatException(record.exc_info)

        extra = {key: value for key, value in record.__dict__.items() if key not in _STANDARD_ATTRS}
        if extra:
            message["extra"] = redact(extra)

        return json.dumps(message, default=str)


def setup_logging() -> None:
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {"json": {"()": JsonFormatter}},
            "handlers": {"default": {"class": "logging.StreamHandler", "formatter": "json"}},
            "root": {"handlers": ["default"], "level": level},
            "loggers": {
                "uvicorn.error": {"level": level},
                "uvicorn.access": {"handlers": ["default"], "level": level, "propagate": False},
                # SQL echo would leak bound parameters such as password hashes.
                "sqlalchemy.engine": {"level": logging.WARNING},
            },
        }
    )


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def security_alert(message: str, **context: Any) -> None:
    """Warning on ``supplier_api.security`` flagged ``alert=True`` (failed logins, lockouts, rejected tokens)."""
    get_logger("supplier_api.security").warning(message, extra={"alert": True, **context})
