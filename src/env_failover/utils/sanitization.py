"""Secret sanitization utilities for logging and error messages.

This module removes credentials (API keys, bearer tokens, tokens embedded in
URLs) from strings and structured data before they are logged or shown in
error messages.

Examples:
    >>> sanitize_text("Authorization: Bearer eyJhbGciOi")
    'Authorization: Bearer <REDACTED>'

    >>> sanitize_url("https://api.example.com/data?api_key=secret123")
    'https://api.example.com/data?api_key=<REDACTED>'

    >>> sanitize_value({"x-api-key": "prod_key_123", "status": 200})
    {'x-api-key': '<REDACTED>', 'status': 200}
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from typing import TypeIs

# Redaction marker for sanitized values
REDACTED = "<REDACTED>"

# Bearer credentials anywhere in free text
_BEARER_PATTERN = re.compile(r"(\bbearer\s+)([A-Za-z0-9\-._~+/]+=*)", re.IGNORECASE)

# "header: value" / "header=value" pairs for credential headers in free text
_CREDENTIAL_PAIR_PATTERN = re.compile(
    r"(\b(?:x-api-key|api[-_]?key|apikey|access[-_]?token|secret)\s*[:=]\s*['\"]?)([^\s'\",&]+)",
    re.IGNORECASE,
)

# Pattern for URLs with tokens in path segments
_GENERIC_TOKEN_IN_PATH = re.compile(
    r"(/(?:token|api[-_]?key|auth|secret|bearer)[=/])([^/?#]+)",
    re.IGNORECASE,
)

# Pattern for URLs with tokens in query parameters
_GENERIC_TOKEN_IN_QUERY = re.compile(
    r"([?&](?:token|access_token|api[-_]?key|auth|secret|bearer)=)([^&#]+)",
    re.IGNORECASE,
)

# Sensitive field name patterns (case-insensitive)
_SENSITIVE_FIELD_PATTERNS = [
    re.compile(pattern, re.IGNORECASE)
    for pattern in [
        r".*token.*",
        r".*key.*",
        r".*secret.*",
        r".*password.*",
        r".*credential.*",
        r".*auth.*",
        r".*bearer.*",
    ]
]


def is_sensitive_field(field_name: str) -> bool:
    """Check if a field name indicates sensitive data.

    Args:
        field_name: The field name to check (e.g., "api_key", "Authorization")

    Returns:
        True if the field name matches sensitive patterns

    Examples:
        >>> is_sensitive_field("api_key")
        True
        >>> is_sensitive_field("Authorization")
        True
        >>> is_sensitive_field("base_url")
        False
    """
    return any(pattern.match(field_name) for pattern in _SENSITIVE_FIELD_PATTERNS)


def sanitize_url(url: str) -> str:
    """Sanitize tokens carried in URL paths or query parameters.

    The URL structure is preserved to keep useful debugging information
    (scheme, host, path) while removing secret values.

    Args:
        url: The URL to sanitize

    Returns:
        Sanitized URL with tokens replaced by the REDACTED marker

    Examples:
        >>> sanitize_url("https://api.example.com/data?token=secret123")
        'https://api.example.com/data?token=<REDACTED>'

        >>> sanitize_url("https://api.example.com/health")
        'https://api.example.com/health'
    """
    if not url or not isinstance(url, str):  # pyright: ignore[reportUnnecessaryIsInstance]
        return url

    sanitized = _GENERIC_TOKEN_IN_PATH.sub(rf"\1{REDACTED}", url)
    return _GENERIC_TOKEN_IN_QUERY.sub(rf"\1{REDACTED}", sanitized)


def sanitize_text(text: str) -> str:
    """Sanitize credentials from free text such as log messages.

    Applies the URL patterns plus bearer-token and credential-header patterns.

    Args:
        text: Text to sanitize

    Returns:
        Text with credentials replaced by the REDACTED marker
    """
    if not text:
        return text

    sanitized = sanitize_url(text)
    sanitized = _BEARER_PATTERN.sub(rf"\1{REDACTED}", sanitized)
    return _CREDENTIAL_PAIR_PATTERN.sub(rf"\1{REDACTED}", sanitized)


def _is_primitive(value: object) -> TypeIs[str | int | float | bool | None]:
    """Type predicate to check if value is a primitive type.

    Args:
        value: Value to check

    Returns:
        True if value is str, int, float, bool, or None
    """
    return isinstance(value, (str, int, float, bool, type(None)))


def _is_mapping(value: object) -> TypeIs[Mapping[str, object]]:
    return isinstance(value, Mapping)


def _is_sequence(value: object) -> TypeIs[Sequence[object]]:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes))


def sanitize_value(
    value: object,
    *,
    field_name: str | None = None,
) -> object:
    """Recursively sanitize sensitive values from structured data.

    Values are redacted when:
    1. Their field name looks sensitive (e.g., "api_key", "Authorization")
    2. They are strings containing credential patterns
    Nested mappings and sequences are processed recursively.

    Args:
        value: The value to sanitize (can be any type)
        field_name: Optional field name for context-aware sanitization

    Returns:
        Sanitized value with secrets replaced by the REDACTED marker

    Examples:
        >>> sanitize_value({"bearer_token": "abc", "count": 42})
        {'bearer_token': '<REDACTED>', 'count': 42}

        >>> sanitize_value(["Bearer abc.def", "ok"])
        ['Bearer <REDACTED>', 'ok']
    """
    if field_name and is_sensitive_field(field_name):
        return REDACTED

    if _is_primitive(value):
        if type(value) is str:  # str subclasses such as enums pass through
            return sanitize_text(value)
        return value

    if _is_mapping(value):
        sanitized_dict: dict[str, object] = {
            key: sanitize_value(val, field_name=str(key)) for key, val in value.items()
        }
        return sanitized_dict

    if _is_sequence(value):
        sanitized_items: list[object] = [sanitize_value(item) for item in value]
        if isinstance(value, tuple):
            return tuple(sanitized_items)
        return sanitized_items

    # Unknown objects are logged by their string form
    return sanitize_text(str(value))


def sanitize_exception(exc: BaseException) -> str:
    """Sanitize exception messages to remove sensitive information.

    Args:
        exc: The exception to sanitize

    Returns:
        Sanitized exception message safe for logging

    Examples:
        >>> sanitize_exception(ValueError("rejected header x-api-key: prod_key_123"))
        'ValueError: rejected header x-api-key: <REDACTED>'
    """
    return f"{type(exc).__name__}: {sanitize_text(str(exc))}"


def sanitize_args(args: tuple[object, ...]) -> tuple[object, ...]:
    """Sanitize a tuple of logging arguments.

    Args:
        args: Tuple of arguments to sanitize

    Returns:
        Tuple with sanitized arguments
    """
    return tuple(sanitize_value(arg) for arg in args)


def sanitize_mapping(
    data: Mapping[str, object],
) -> dict[str, object]:
    """Sanitize a mapping (e.g., request headers) for safe output.

    Args:
        data: Mapping to sanitize

    Returns:
        Dictionary with sanitized values

    Examples:
        >>> sanitize_mapping({"Authorization": "Bearer abc", "Accept": "application/json"})
        {'Authorization': '<REDACTED>', 'Accept': 'application/json'}
    """
    return {key: sanitize_value(val, field_name=key) for key, val in data.items()}
