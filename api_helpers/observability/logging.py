"""Structured logging configuration."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from logging import Logger

from flask import Flask

DEFAULT_LOGGER_NAME = "api_helpers"

# Attributes every LogRecord carries; anything else came in through ``extra=``.
_RESERVED_ATTRS = frozenset(
    {
        "args",
        "asctime",
        "created",
        "exc_info",
        "exc_text",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "message",
        "msg",
        "name",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "taskName",
        "thread",
        "threadName",
    }
)


class JsonFormatter(logging.Formatter):
    """Render each record as a single line of JSON."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401 - obvious
        payload: dict[str, object] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        if record.stack_info:
            payload["stack"] = self.formatStack(record.stack_info)

        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS or key in payload or key.startswith("_"):
                continue
            if value is None and key == "request_id":
                continue
            payload[key] = value

        return json.dumps(
            payload, separators=(",", ":"), sort_keys=True, ensure_ascii=False, default=str
        )


def configure_structured_logging(app: Flask) -> Logger:
    """Attach a JSON stream handler to the application logger and bind it to ``app``."""

    logger_name = app.config.get("LOGGER_NAME", DEFAULT_LOGGER_NAME)
    logger = logging.getLogger(logger_name)
    logger.setLevel(app.config.get("LOG_LEVEL", logging.INFO))
    logger.handlers = []

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(JsonFormatter())
    logger.addHandler(stream_handler)

    logger.propagate = False
    app.logger = logger
    return logger
