"""Structured JSON logging configuration."""

import json
import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict

SERVICE_LOGGER_FIELD = "service"

# LogRecord attributes that are not user-supplied extras
_RESERVED_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__
) | {"message", "asctime", "taskName"}


class JSONFormatter(logging.Formatter):
    """Render each record as one JSON object per line.

    Values passed through ``extra={...}`` become top-level keys, so
    ``logger.info("User logged in", extra={"userId": "abc"})`` yields
    ``{"message": "User logged in", "userId": "abc", ...}``.
    """

    def __init__(self, service: str | None = None):
        super().__init__()
        self.service = service

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc)
            .isoformat()
            .replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if self.service:
            log_data[SERVICE_LOGGER_FIELD] = self.service

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and not callable(value):
                log_data[key] = value

        # datetimes and other non-JSON values in extras are stringified
        return json.dumps(log_data, default=str)


def setup_structured_logging(service: str | None = None) -> None:
    """Route every logger, uvicorn's included, through the JSON formatter.

    The level comes from LOG_LEVEL (default INFO).
    """
    handler = logging.StreamHandler()
    handler.setFormatter(JSONFormatter(service))

    level = getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO)
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = [handler]

    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers = [handler]
        uvicorn_logger.propagate = False
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("pymongo").setLevel(logging.WARNING)
