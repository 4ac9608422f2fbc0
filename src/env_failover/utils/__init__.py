"""Shared utilities: HTTP transport, logging setup and secret sanitization."""

from env_failover.utils.http_client import AIOHTTPTransport, build_url
from env_failover.utils.logging import (
    configure_logging,
    correlation_scope,
    get_correlation_id,
    set_correlation_id,
)
from env_failover.utils.sanitization import (
    REDACTED,
    sanitize_exception,
    sanitize_mapping,
    sanitize_text,
    sanitize_url,
    sanitize_value,
)

__all__ = [
    # HTTP transport
    "AIOHTTPTransport",
    "build_url",
    # Logging
    "configure_logging",
    "correlation_scope",
    "get_correlation_id",
    "set_correlation_id",
    # Sanitization
    "REDACTED",
    "sanitize_exception",
    "sanitize_mapping",
    "sanitize_text",
    "sanitize_url",
    "sanitize_value",
]
