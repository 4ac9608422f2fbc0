"""env-failover - Multi-environment API client failover for asyncio applications.

This package keeps track of the active backend environment of an API client,
switches between environments behind a health check, and runs operations with
automatic fallback to the next environment when one fails.
"""

from env_failover.config import FailoverSettings, build_controller, load_settings, start_controller
from env_failover.core import (
    AllEnvironmentsFailedError,
    BaseInterceptor,
    FailoverController,
    FailoverError,
    FailoverInstances,
    HealthProber,
    ListenerHandle,
    NotInitializedError,
    OperationTimeoutError,
    UnknownEnvironmentError,
    UnknownInstanceError,
)
from env_failover.types import AuthType, Environment, EnvironmentConfig, FailoverStats, Response
from env_failover.utils import AIOHTTPTransport, configure_logging

__version__ = "0.1.0"

__all__ = [
    "AIOHTTPTransport",
    "AllEnvironmentsFailedError",
    "AuthType",
    "BaseInterceptor",
    "Environment",
    "EnvironmentConfig",
    "FailoverController",
    "FailoverError",
    "FailoverInstances",
    "FailoverSettings",
    "FailoverStats",
    "HealthProber",
    "ListenerHandle",
    "NotInitializedError",
    "OperationTimeoutError",
    "Response",
    "UnknownEnvironmentError",
    "UnknownInstanceError",
    "build_controller",
    "configure_logging",
    "load_settings",
    "start_controller",
]
