"""Type definitions and protocols for env-failover.

This package provides:
- Data models (immutable dataclasses)
- Protocol definitions (structural subtyping interfaces)
- Type aliases (PEP 695 modern syntax)
"""

from env_failover.types.aliases import (
    EnvironmentId,
    EnvironmentListener,
    Operation,
    ProbeTransport,
)
from env_failover.types.models import (
    AuthType,
    Environment,
    EnvironmentConfig,
    FailoverStats,
    Response,
    TransportRequest,
    environment_name,
)
from env_failover.types.protocols import (
    HTTPTransport,
    Interceptor,
)

__all__ = [
    # Type aliases
    "EnvironmentId",
    "EnvironmentListener",
    "Operation",
    "ProbeTransport",
    # Data models
    "AuthType",
    "Environment",
    "EnvironmentConfig",
    "FailoverStats",
    "Response",
    "TransportRequest",
    "environment_name",
    # Protocols
    "HTTPTransport",
    "Interceptor",
]
