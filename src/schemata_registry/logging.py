"""Logging utilities for the schemata registry.

This module provides standardized logging functionality for registry operations.
"""

import logging
from enum import Enum
from typing import Any

ROOT_LOGGER_NAME = "schemata_registry"


class LogLevel(int, Enum):
    """Log levels for the registry."""

    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL


class LogEvent(str, Enum):
    """Event types for registry logging."""

    LOCATION = "location"
    RETRIEVAL = "retrieval"
    SCHEMA_REGISTRY = "schema_registry"
    SCHEMA_VALIDATION = "schema_validation"
    SCHEMA_MATCHING = "schema_matching"
    TEMPLATE_REGISTRY = "template_registry"


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the package logger namespace.

    Args:
        name: Short logger name (``registry``) or a dotted module name

    Returns:
        Logger instance
    """
    if name == ROOT_LOGGER_NAME or name.startswith(f"{ROOT_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


_event_logger = get_logger("events")


def _log(level: LogLevel, event: LogEvent, message: str, data: Any) -> None:
    """Emit a log record with the event and its data attached.

    Args:
        level: Severity level
        event: Event type
        message: Human readable message
        data: Dictionary of event data
    """
    if not _event_logger.isEnabledFor(level):
        return
    if data:
        details = ", ".join(f"{key}={value}" for key, value in data.items())
        text = f"[{event.value}] {message} ({details})"
    else:
        text = f"[{event.value}] {message}"
    _event_logger.log(level, text, extra={"event": event.value, "data": data})


def log_debug(event: LogEvent, message: str, **data: Any) -> None:
    """Log a debug event."""
    _log(LogLevel.DEBUG, event, message, data)


def log_info(event: LogEvent, message: str, **data: Any) -> None:
    """Log an info event."""
    _log(LogLevel.INFO, event, message, data)


def log_warning(event: LogEvent, message: str, **data: Any) -> None:
    """Log a warning event."""
    _log(LogLevel.WARNING, event, message, data)


def log_error(event: LogEvent, message: str, **data: Any) -> None:
    """Log an error event."""
    _log(LogLevel.ERROR, event, message, data)
