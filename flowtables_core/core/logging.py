"""
Logging Configuration

Structured logging setup for the service: JSON lines in production and a
readable single-line format for development.
"""

import json
import logging
import os
import sys
import traceback
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

import structlog


class LogFormat(str, Enum):
    """Log output formats."""

    JSON = "json"
    PRETTY = "pretty"


DEFAULT_LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
DEFAULT_LOG_FORMAT = os.getenv(
    "LOG_FORMAT",
    "json" if os.getenv("ENVIRONMENT") == "production" else "pretty",
)
SERVICE_NAME = os.getenv("SERVICE_NAME", "flowtables")

# Attributes every LogRecord carries; anything else came in through `extra`
_RESERVED_ATTRS = frozenset({
    "name", "msg", "args", "levelname", "levelno", "pathname",
    "filename", "module", "lineno", "funcName", "created",
    "msecs", "relativeCreated", "thread", "threadName",
    "processName", "process", "message", "exc_info", "exc_text",
    "stack_info", "taskName",
})

# Context keys promoted to top-level fields in JSON output
_CONTEXT_KEYS = ("request_id", "project_id", "table_id", "flow_id")


def _extra_fields(record: logging.LogRecord) -> Dict[str, Any]:
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _RESERVED_ATTRS and not key.startswith("_")
    }


class JSONFormatter(logging.Formatter):
    """JSON log formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        extra = _extra_fields(record)

        entry: Dict[str, Any] = {
            "timestamp": datetime.utcnow().isoformat() + "Z",
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "service": SERVICE_NAME,
        }
        for key in _CONTEXT_KEYS:
            if key in extra:
                entry[key] = extra.pop(key)
        if extra:
            entry["context"] = extra

        if record.exc_info:
            entry["error"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
            }
            entry["stack_trace"] = "".join(traceback.format_exception(*record.exc_info))

        return json.dumps(entry, default=str)


class PrettyFormatter(logging.Formatter):
    """Human-readable log formatter for development."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, "")
        timestamp = datetime.utcnow().strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]

        message = (
            f"{timestamp} | {color}{record.levelname:8}{self.RESET} | "
            f"\033[90m{record.name}\033[0m | {record.getMessage()}"
        )

        extra = _extra_fields(record)
        if extra:
            message += " | " + " ".join(f"{k}={v}" for k, v in extra.items())

        if record.exc_info:
            message += "\n" + "".join(traceback.format_exception(*record.exc_info))

        return message


def setup_logging(
    level: str = DEFAULT_LOG_LEVEL,
    format: str = DEFAULT_LOG_FORMAT,
    service_name: Optional[str] = None,
) -> None:
    """
    Configure logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format: Log format (json, pretty)
        service_name: Service name for log entries
    """
    global SERVICE_NAME

    if service_name:
        SERVICE_NAME = service_name

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(getattr(logging, level.upper()))
    if format == LogFormat.JSON or format == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(PrettyFormatter())
    root_logger.addHandler(handler)

    # Suppress noisy third-party loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    # structlog events are handed to the stdlib handlers above, with their
    # key/value pairs carried as `extra`
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.stdlib.render_to_log_kwargs,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    root_logger.info(
        "Logging configured",
        extra={"level": level, "format": format},
    )


__all__ = [
    "LogFormat",
    "JSONFormatter",
    "PrettyFormatter",
    "setup_logging",
]
