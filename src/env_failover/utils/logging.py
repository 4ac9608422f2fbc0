"""Structured logging infrastructure with correlation ID tracking and secret redaction.

This module provides the logging setup used by applications embedding
env-failover: correlation IDs carried in a ContextVar (so every log line of
one fallback run can be grouped), redaction of API keys and bearer tokens,
and optional syslog output.

The library itself only creates module-level loggers; handlers are installed
by :func:`configure_logging`, which the embedding application calls once.
"""

import contextvars
import logging
import logging.handlers
import sys
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Final, override

from env_failover.utils.sanitization import (
    sanitize_args,
    sanitize_text,
    sanitize_value,
)

# Correlation ID context variable for tracking one fallback run across attempts
# Automatically inherited by asyncio tasks created within the same context
correlation_id_var: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "correlation_id",
    default=None,
)

# Log format constants
DEFAULT_LOG_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - [%(correlation_id)s] - %(message)s"

SYSLOG_LOG_FORMAT: Final[str] = (
    "env-failover[%(process)d]: %(levelname)s - [%(correlation_id)s] - %(name)s - %(message)s"
)

DEFAULT_SYSLOG_ADDRESS: Final[str] = "/dev/log"

# Standard LogRecord attributes, never treated as extra context
_STANDARD_RECORD_ATTRS: Final[frozenset[str]] = frozenset(
    {
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
        "correlation_id",
    }
)


class CorrelationIDFilter(logging.Filter):
    """Logging filter that adds the current correlation ID to log records."""

    @override
    def filter(self, record: logging.LogRecord) -> bool:
        """Add correlation ID to log record from ContextVar.

        Args:
            record: Log record to enhance with correlation ID

        Returns:
            True to allow the record to be logged
        """
        correlation_id = correlation_id_var.get()
        record.correlation_id = correlation_id if correlation_id is not None else "N/A"
        return True


class SecretRedactingFilter(logging.Filter):
    """Logging filter that redacts credentials from log records.

    Sanitizes the message text, the %-format arguments and any structured
    context passed through ``extra``.

    Examples:
        >>> logger.info("Calling %s", "https://api.example.com/v1?api_key=abc")
        # Logged as: "Calling https://api.example.com/v1?api_key=<REDACTED>"

        >>> logger.warning("Rejected", extra={"headers": {"Authorization": "Bearer abc"}})
        # extra sanitized to: {"headers": {"Authorization": "<REDACTED>"}}
    """

    @override
    def filter(self, record: logging.LogRecord) -> bool:
        """Sanitize sensitive information from log record.

        Args:
            record: Log record to sanitize

        Returns:
            True to allow the record to be logged (always)
        """
        if isinstance(record.msg, str):
            record.msg = sanitize_text(record.msg)

        if record.args and isinstance(record.args, tuple):
            record.args = sanitize_args(record.args)

        for attr_name in list(record.__dict__.keys()):
            if attr_name not in _STANDARD_RECORD_ATTRS and not attr_name.startswith("_"):
                attr_value: object = getattr(record, attr_name)  # pyright: ignore[reportAny]
                setattr(record, attr_name, sanitize_value(attr_value, field_name=attr_name))

        return True


def configure_logging(
    *,
    log_level: str = "INFO",
    enable_console: bool = True,
    enable_syslog: bool = False,
    syslog_address: str = DEFAULT_SYSLOG_ADDRESS,
) -> None:
    """Configure application logging with correlation IDs and secret redaction.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        enable_console: Enable console output handler
        enable_syslog: Enable syslog handler
        syslog_address: Syslog socket address

    Example:
        >>> configure_logging(log_level="DEBUG")
        >>> logger = logging.getLogger(__name__)
        >>> logger.info("Switched environment", extra={"environment": "staging"})
    """
    root_logger = logging.getLogger()

    level = getattr(logging, log_level.upper(), logging.INFO)  # pyright: ignore[reportAny]
    root_logger.setLevel(level)  # pyright: ignore[reportAny]

    # Remove existing handlers to avoid duplicates
    root_logger.handlers.clear()

    correlation_filter = CorrelationIDFilter()
    secret_filter = SecretRedactingFilter()

    if enable_syslog:
        try:
            syslog_handler = logging.handlers.SysLogHandler(
                address=syslog_address,
                facility=logging.handlers.SysLogHandler.LOG_USER,
            )
            syslog_handler.setFormatter(logging.Formatter(SYSLOG_LOG_FORMAT))
            syslog_handler.addFilter(correlation_filter)
            syslog_handler.addFilter(secret_filter)
            root_logger.addHandler(syslog_handler)
        except OSError as exc:
            # Syslog not available (e.g., development environment)
            print(
                f"Warning: Could not connect to syslog at {syslog_address}: {exc}",
                file=sys.stderr,
            )

    if enable_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(logging.Formatter(DEFAULT_LOG_FORMAT))
        console_handler.addFilter(correlation_filter)
        console_handler.addFilter(secret_filter)
        root_logger.addHandler(console_handler)


def generate_correlation_id() -> str:
    """Create a new short correlation ID.

    Returns:
        First 12 hex characters of a random UUID
    """
    return uuid.uuid4().hex[:12]


def set_correlation_id(correlation_id: str) -> None:
    """Set the correlation ID for the current context.

    Args:
        correlation_id: Unique identifier for correlation (e.g., UUID)
    """
    _ = correlation_id_var.set(correlation_id)


def get_correlation_id() -> str | None:
    """Get the current correlation ID from context.

    Returns:
        Current correlation ID or None if not set
    """
    return correlation_id_var.get()


def clear_correlation_id() -> None:
    """Clear the correlation ID from the current context."""
    _ = correlation_id_var.set(None)


@contextmanager
def correlation_scope(correlation_id: str | None = None) -> Iterator[str]:
    """Run a block under a correlation ID.

    An ID already set by the caller is kept unless one is passed explicitly;
    otherwise a new one is generated. The previous value is restored on exit.

    Args:
        correlation_id: Explicit correlation ID for the block

    Yields:
        The correlation ID in effect inside the block

    Example:
        >>> with correlation_scope() as run_id:
        ...     logger.info("Starting fallback run")
    """
    effective = correlation_id or correlation_id_var.get() or generate_correlation_id()
    token = correlation_id_var.set(effective)
    try:
        yield effective
    finally:
        correlation_id_var.reset(token)

