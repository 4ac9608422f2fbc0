"""Failover core: registry, health probing, switching and fallback execution.

Modules in this package never import an HTTP client library at module level;
the aiohttp transport is imported inside the functions that default to it.
"""

from env_failover.core.controller import (
    DEFAULT_CONFIGS,
    DEFAULT_FALLBACK_ENVIRONMENTS,
    FailoverController,
    ListenerHandle,
)
from env_failover.core.exceptions import (
    AllEnvironmentsFailedError,
    FailoverError,
    HealthCheckFailedError,
    NotInitializedError,
    OperationTimeoutError,
    UnknownEnvironmentError,
    UnknownInstanceError,
)
from env_failover.core.executor import FallbackExecutor
from env_failover.core.instances import DEFAULT_INSTANCE_NAME, FailoverInstances
from env_failover.core.interceptors import BaseInterceptor, InterceptorChain
from env_failover.core.prober import DEFAULT_PROBE_TIMEOUT_SECONDS, HealthProber
from env_failover.core.registry import EnvironmentRegistry
from env_failover.core.scheduler import DEFAULT_HEALTH_CHECK_INTERVAL_SECONDS, HealthCheckScheduler

__all__ = [
    "DEFAULT_CONFIGS",
    "DEFAULT_FALLBACK_ENVIRONMENTS",
    "DEFAULT_HEALTH_CHECK_INTERVAL_SECONDS",
    "DEFAULT_INSTANCE_NAME",
    "DEFAULT_PROBE_TIMEOUT_SECONDS",
    "AllEnvironmentsFailedError",
    "BaseInterceptor",
    "EnvironmentRegistry",
    "FailoverController",
    "FailoverError",
    "FailoverInstances",
    "FallbackExecutor",
    "HealthCheckFailedError",
    "HealthCheckScheduler",
    "HealthProber",
    "InterceptorChain",
    "ListenerHandle",
    "NotInitializedError",
    "OperationTimeoutError",
    "UnknownEnvironmentError",
    "UnknownInstanceError",
]
