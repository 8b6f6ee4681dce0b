"""
Structured logging configuration for the journal service.

JSON lines in production, a readable single-line format in development.
Both carry the request correlation ID so one submission can be followed
across the generation fan-out and the database write.

Usage:
    from app.shared.logging_config import setup_logging

    # At application startup (main.py):
    setup_logging(service_name="qjournal-service")

    # In modules:
    logger = logging.getLogger("QJournal.Journal")
    logger.info("Entry saved", extra={"user_id": 12, "entry_date": "2024-01-15"})

Output format (JSON, one line per log):
    {
        "timestamp": "2024-01-15T21:30:00.123456+00:00",
        "level": "INFO",
        "logger": "QJournal.Journal",
        "message": "Entry saved",
        "service": "qjournal-service",
        "correlation_id": "abc123",
        "user_id": 12,
        "entry_date": "2024-01-15"
    }
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Optional

from app.shared.correlation import get_correlation_id

# Attributes every LogRecord has; anything else came in through ``extra``.
_STANDARD_ATTRS = {
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "pathname", "process", "processName", "relativeCreated",
    "stack_info", "exc_info", "exc_text", "thread", "threadName",
    "correlation_id", "message", "taskName",
}


def _extra_fields(record: logging.LogRecord) -> dict:
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _STANDARD_ATTRS and not key.startswith("_")
    }


class CorrelationIdFilter(logging.Filter):
    """
    Logging filter that injects correlation_id into log records.

    The ID comes from the context variable the correlation middleware sets
    for each request; records logged outside a request get "-".
    """

    def filter(self, record: logging.LogRecord) -> bool:
        """Add correlation_id to record if not present."""
        if not hasattr(record, "correlation_id"):
            record.correlation_id = get_correlation_id() or "-"
        return True


class JSONFormatter(logging.Formatter):
    """
    Formats log records as JSON for structured logging.

    Includes standard fields (timestamp, level, message) plus any
    extra fields passed to the logger.
    """

    def __init__(self, service_name: str = "qjournal"):
        """
        Initialize the JSON formatter.

        Args:
            service_name: Name of the service for log identification
        """
        super().__init__()
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        """
        Format the log record as a JSON string.

        Args:
            record: The log record to format

        Returns:
            JSON-formatted log string
        """
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": self.service_name,
        }

        correlation_id = getattr(record, "correlation_id", None)
        if correlation_id and correlation_id != "-":
            log_entry["correlation_id"] = correlation_id

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        for key, value in _extra_fields(record).items():
            try:
                json.dumps(value)
                log_entry[key] = value
            except (TypeError, ValueError):
                log_entry[key] = str(value)

        return json.dumps(log_entry)


class HumanReadableFormatter(logging.Formatter):
    """
    Human-readable formatter for local development.

    Includes correlation ID in log messages for easier debugging.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format record with correlation ID prefix."""
        correlation_id = getattr(record, "correlation_id", "-")
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        prefix = f"{timestamp} [{record.levelname}] [{correlation_id}]"

        extras = ", ".join(f"{key}={value}" for key, value in _extra_fields(record).items())
        formatted = f"{prefix} {record.name}: {record.getMessage()}"
        if extras:
            formatted += f" | {extras}"

        if record.exc_info:
            formatted += "\n" + self.formatException(record.exc_info)

        return formatted


def setup_logging(
    service_name: str,
    level: Optional[str] = None,
    json_output: Optional[bool] = None,
) -> None:
    """
    Configure logging for the application.

    Args:
        service_name: Name of the service (e.g., "qjournal-service")
        level: Log level (DEBUG, INFO, WARNING, ERROR). Defaults to INFO
               or value from LOG_LEVEL environment variable.
        json_output: If True, output JSON logs. If False, human-readable.
                     Defaults to True unless ENVIRONMENT is "development".
    """
    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO").upper()

    log_level = getattr(logging, level, logging.INFO)

    if json_output is None:
        environment = os.getenv("ENVIRONMENT", "production").lower()
        json_output = environment != "development"

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(JSONFormatter(service_name=service_name) if json_output else HumanReadableFormatter())
    handler.addFilter(CorrelationIdFilter())

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove existing handlers to avoid duplicates
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    # Reduce noise from third-party libraries
    noisy_loggers = [
        "httpx",
        "httpcore",
        "hpack",
        "asyncio",
        "anthropic",
        "openai",
        "postgrest",
    ]
    for logger_name in noisy_loggers:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    logging.getLogger(f"{service_name}.startup").info(
        "Logging configured",
        extra={
            "log_level": level,
            "json_output": json_output,
            "environment": os.getenv("ENVIRONMENT", "production"),
        },
    )
