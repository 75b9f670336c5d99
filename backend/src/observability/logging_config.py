"""Structured JSON logging configuration.

Provides centralized logging setup with operation ID correlation and JSON formatting.
"""

import logging
import json
import sys
from datetime import datetime, timezone
from typing import Optional

from config import get_settings

from .operation_id import get_operation_id

# Extra fields copied from log records into the JSON payload
EXTRA_FIELDS = ("entity_type", "association", "live_id", "source")


class OperationIDFilter(logging.Filter):
    """Add operation_id to all log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Add operation_id attribute to log record.

        Args:
            record: Log record to enhance

        Returns:
            bool: Always True (don't filter out records)
        """
        record.operation_id = get_operation_id()
        return True


class JSONFormatter(logging.Formatter):
    """Format log records as JSON."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON string.

        Args:
            record: Log record to format

        Returns:
            str: JSON-formatted log message
        """
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "operation_id": getattr(record, "operation_id", "no-operation-id"),
            "logger": record.name,
            "module": record.module,
            "function": record.funcName,
            "message": record.getMessage(),
        }

        # Add exception info if present
        if record.exc_info:
            log_data["error"] = str(record.exc_info[1])
            log_data["traceback"] = self.formatException(record.exc_info)

        for field in EXTRA_FIELDS:
            if hasattr(record, field):
                log_data[field] = str(getattr(record, field))

        return json.dumps(log_data)


def configure_logging(level: Optional[str] = None, json_format: Optional[bool] = None) -> None:
    """Configure application-wide logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR); defaults to LOG_LEVEL
        json_format: If True, use JSON formatter; otherwise use simple format.
            Defaults to LOG_JSON
    """
    settings = get_settings()
    if level is None:
        level = settings.LOG_LEVEL
    if json_format is None:
        json_format = settings.LOG_JSON

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))

    # Remove existing handlers
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(getattr(logging, level.upper()))

    if json_format:
        formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(
            '%(asctime)s - %(levelname)s - %(operation_id)s - %(module)s.%(funcName)s - %(message)s'
        )

    handler.setFormatter(formatter)
    handler.addFilter(OperationIDFilter())
    root_logger.addHandler(handler)

    # Suppress noisy third-party loggers
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        logging.Logger: Configured logger instance
    """
    return logging.getLogger(name)
