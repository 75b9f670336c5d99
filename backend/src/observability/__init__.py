"""Observability helpers: JSON logging and draft operation correlation."""

from .logging_config import JSONFormatter, OperationIDFilter, configure_logging, get_logger
from .operation_id import generate_operation_id, get_operation_id, operation_scope

__all__ = [
    "JSONFormatter",
    "OperationIDFilter",
    "configure_logging",
    "get_logger",
    "generate_operation_id",
    "get_operation_id",
    "operation_scope",
]
