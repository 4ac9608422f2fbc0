"""Data models for env-failover.

This module defines the immutable environment configuration record together
with the small dataclasses passed between the controller, the prober and the
transport layer.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Hashable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from env_failover.types.protocols import Interceptor

DEFAULT_API_KEY_HEADER: Final[str] = "x-api-key"
DEFAULT_BEARER_HEADER: Final[str] = "Authorization"


class Environment(Enum):
    """Built-in backend environments."""

    PRODUCTION = "production"
    STAGING = "staging"
    DEVELOPMENT = "development"


class AuthType(Enum):
    """Authentication scheme applied to transport calls."""

    API_KEY = "api_key"  # Primary key only
    BEARER = "bearer"  # Secondary token only
    BOTH = "both"  # Secondary token preferred, primary key otherwise


@dataclass(slots=True, frozen=True)
class EnvironmentConfig:
    """Immutable configuration of one backend environment.

    The operation timeout is the default bound for a single fallback attempt
    against this environment. ``max_retries`` is informational; the number of
    fallback attempts is driven by the fallback order.
    """

    base_url: str
    api_key: str
    enable_logging: bool = False
    enable_analytics: bool = False
    timeout_seconds: float = 30.0
    max_retries: int = 0
    bearer_token: str | None = None
    custom_auth_header: str | None = None
    auth_type: AuthType = AuthType.API_KEY
    interceptors: tuple[Interceptor, ...] = field(default=(), repr=False)

    def with_overrides(self, **changes: object) -> EnvironmentConfig:
        """Return a copy of this config with the given fields replaced.

        Args:
            **changes: Field names and their new values

        Returns:
            New EnvironmentConfig instance
        """
        return dataclasses.replace(self, **changes)  # pyright: ignore[reportArgumentType]

    def auth_headers(self) -> dict[str, str]:
        """Build the authentication header for this environment.

        Returns:
            Mapping with at most one header, empty when the scheme requires a
            bearer token and none is configured
        """
        bearer_header = self.custom_auth_header or DEFAULT_BEARER_HEADER
        key_header = self.custom_auth_header or DEFAULT_API_KEY_HEADER

        match self.auth_type:
            case AuthType.API_KEY:
                return {key_header: self.api_key}
            case AuthType.BEARER:
                if self.bearer_token is None:
                    return {}
                return {bearer_header: f"Bearer {self.bearer_token}"}
            case AuthType.BOTH:
                if self.bearer_token is not None:
                    return {bearer_header: f"Bearer {self.bearer_token}"}
                return {key_header: self.api_key}


@dataclass(slots=True)
class TransportRequest:
    """Outgoing transport call, handed to interceptor ``before_call`` hooks.

    Interceptors may add or change headers before the call is sent.
    """

    method: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    body: object = None


@dataclass(slots=True)
class Response:
    """HTTP response.

    Represents an HTTP response with status code, body, and headers.
    """

    status: int
    body: object
    headers: Mapping[str, str]

    @property
    def ok(self) -> bool:
        """True for 2xx status codes."""
        return 200 <= self.status < 300


@dataclass(slots=True, frozen=True)
class FailoverStats:
    """Point-in-time snapshot of a controller."""

    active: str
    initialized: bool
    registry_size: int
    listener_count: int
    scheduler_running: bool

    def to_dict(self) -> dict[str, object]:
        """Convert the snapshot to a plain dictionary.

        Returns:
            Dictionary with ``current_environment``, ``is_initialized``,
            ``total_configs``, ``total_listeners`` and ``health_check_active``
        """
        return {
            "current_environment": self.active,
            "is_initialized": self.initialized,
            "total_configs": self.registry_size,
            "total_listeners": self.listener_count,
            "health_check_active": self.scheduler_running,
        }


def environment_name(environment: Hashable) -> str:
    """Human-readable name of an environment identifier.

    Args:
        environment: Enum member or any other hashable identifier

    Returns:
        The enum value for Enum members, ``str()`` of the identifier otherwise
    """
    if isinstance(environment, Enum):
        return str(environment.value)  # pyright: ignore[reportAny]
    return str(environment)
