"""Logging configuration for the survey collection service.

This module sets up structured logging with JSON formatting for production
and human-readable formatting for development. Every record carries the id
of the request it was emitted under, so log lines can be correlated.
"""

import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Mapping, Optional

from app.config import Settings, get_settings

# Id of the request currently being handled ("-" outside of a request)
request_id_var: ContextVar[str] = ContextVar("request_id", default="-")

SENSITIVE_HEADERS = frozenset({"authorization", "cookie", "x-api-key"})

# Attributes every LogRecord has; anything else was passed through `extra=`
_RESERVED_ATTRS = frozenset({
    "name",
    "msg",
    "args",
    "created",
    "filename",
    "funcName",
    "levelname",
    "levelno",
    "lineno",
    "module",
    "msecs",
    "message",
    "pathname",
    "process",
    "processName",
    "relativeCreated",
    "thread",
    "threadName",
    "taskName",
    "exc_info",
    "exc_text",
    "stack_info",
    "request_id",
})


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging in production.

    Formats log records as JSON objects with timestamp, level, message,
    request id and any context passed through ``extra=``.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON string.

        Args:
            record: Log record to format

        Returns:
            JSON-formatted log string
        """
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "request_id": getattr(record, "request_id", request_id_var.get()),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_data[key] = value

        return json.dumps(log_data, default=str)


class DevelopmentFormatter(logging.Formatter):
    """Human-readable formatter for development.

    Formats log records with color coding and clear structure for
    easier reading during development.
    """

    # ANSI color codes
    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
        "RESET": "\033[0m",  # Reset
    }

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with colors for development.

        Args:
            record: Log record to format

        Returns:
            Colored, formatted log string
        """
        color = self.COLORS.get(record.levelname, self.COLORS["RESET"])
        reset = self.COLORS["RESET"]

        formatted = (
            f"{color}[{record.levelname:8}]{reset} "
            f"{record.name:30} - {record.getMessage()}"
        )

        request_id = getattr(record, "request_id", "-")
        if request_id != "-":
            formatted += f" [request_id={request_id}]"

        if record.exc_info:
            formatted += "\n" + self.formatException(record.exc_info)

        return formatted


class RequestContextFilter(logging.Filter):
    """Logging filter that adds request context to log records.

    Reads the current request id from ``request_id_var`` so that every
    record emitted while a request is being handled carries its id.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        """Add context fields to log record.

        Args:
            record: Log record to modify

        Returns:
            Always True to allow the record through
        """
        record.request_id = request_id_var.get()
        return True


def setup_logging(settings: Optional[Settings] = None) -> None:
    """Configure application logging based on environment.

    In production, uses JSON formatting for structured logs.
    In development, uses colored human-readable formatting.

    Args:
        settings: Settings to configure from (defaults to get_settings())
    """
    settings = settings or get_settings()

    root_logger = logging.getLogger()
    root_logger.setLevel(settings.log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(settings.log_level)
    console_handler.addFilter(RequestContextFilter())

    if settings.is_production:
        formatter = JSONFormatter()
    else:
        formatter = DevelopmentFormatter()

    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # Set log levels for third-party libraries
    logging.getLogger("uvicorn").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)
    logger.info(
        f"Logging configured - Environment: {settings.environment}, "
        f"Level: {settings.log_level}"
    )


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for the given name.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured logger instance
    """
    return logging.getLogger(name)


def redact_headers(
    headers: Mapping[str, str],
    sensitive: Iterable[str] = SENSITIVE_HEADERS
) -> Dict[str, str]:
    """Copy headers, replacing the values of sensitive ones.

    Args:
        headers: Request headers
        sensitive: Lowercase header names whose values must not be logged

    Returns:
        dict: Headers safe to write to the log
    """
    sensitive = {name.lower() for name in sensitive}
    return {
        key: "[REDACTED]" if key.lower() in sensitive else value
        for key, value in headers.items()
    }


def log_request_event(
    logger: logging.Logger,
    method: str,
    path: str,
    query_params: Mapping[str, str],
    headers: Mapping[str, str],
    level: int = logging.INFO
) -> None:
    """Log a summary of an inbound HTTP request.

    Args:
        logger: Logger to write to
        method: HTTP method
        path: Request path
        query_params: Query string parameters
        headers: Request headers (sensitive values are redacted)
        level: Log level of the event
    """
    event = {
        "httpMethod": method,
        "path": path,
        "queryStringParameters": dict(query_params) or None,
        "headers": redact_headers(headers),
    }
    logger.log(level, f"HTTP request {method} {path}", extra={"event": event})
