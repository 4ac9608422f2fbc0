"""Exception hierarchy for the failover core."""

from __future__ import annotations

from collections.abc import Hashable, Sequence

from env_failover.types.models import environment_name


class FailoverError(Exception):
    """Base exception for all failover errors."""

    def __init__(self, message: str, context: dict[str, object] | None = None) -> None:
        """Initialize FailoverError.

        Args:
            message: Error message
            context: Additional context information for debugging
        """
        super().__init__(message)
        self.context: dict[str, object] = context or {}


class NotInitializedError(FailoverError, RuntimeError):
    """Raised when an operation requires an initialized controller."""

    def __init__(self, operation: str) -> None:
        """Initialize NotInitializedError.

        Args:
            operation: Name of the rejected operation
        """
        super().__init__(
            f"Failover controller is not initialized; call initialize() before {operation}()",
            {"operation": operation},
        )
        self.operation: str = operation


class UnknownEnvironmentError(FailoverError, ValueError):
    """Raised when switching to an environment without a registered config."""

    def __init__(self, environment: Hashable) -> None:
        """Initialize UnknownEnvironmentError.

        Args:
            environment: Identifier that has no registry entry
        """
        super().__init__(
            f"Environment '{environment_name(environment)}' is not configured",
            {"environment": environment_name(environment)},
        )
        self.environment: Hashable = environment


class UnknownInstanceError(FailoverError, ValueError):
    """Raised when a named failover instance does not exist."""

    def __init__(self, instance_name: str) -> None:
        """Initialize UnknownInstanceError.

        Args:
            instance_name: Name that was looked up
        """
        super().__init__(
            f"Failover instance '{instance_name}' does not exist",
            {"instance_name": instance_name},
        )
        self.instance_name: str = instance_name


class OperationTimeoutError(FailoverError, TimeoutError):
    """Raised when a fallback attempt exceeds its time bound."""

    def __init__(self, environment: Hashable, timeout_seconds: float) -> None:
        """Initialize OperationTimeoutError.

        Args:
            environment: Environment the attempt ran against
            timeout_seconds: Bound that was exceeded
        """
        super().__init__(
            f"Operation against '{environment_name(environment)}' timed out after {timeout_seconds:.1f}s",
            {"environment": environment_name(environment), "timeout_seconds": timeout_seconds},
        )
        self.environment: Hashable = environment
        self.timeout_seconds: float = timeout_seconds


class AllEnvironmentsFailedError(FailoverError):
    """Raised when a fallback walk ends without any recorded attempt."""

    def __init__(self, attempted: Sequence[Hashable]) -> None:
        """Initialize AllEnvironmentsFailedError.

        Args:
            attempted: The fallback order that was walked
        """
        names = [environment_name(env) for env in attempted]
        super().__init__(
            f"All environments failed (order: {', '.join(names) or 'empty'})",
            {"attempted": names},
        )
        self.attempted: tuple[Hashable, ...] = tuple(attempted)


class HealthCheckFailedError(FailoverError):
    """Handed to interceptor error hooks when a probe reports an unhealthy environment.

    Never raised to callers of the controller.
    """

    def __init__(self, base_url: str) -> None:
        """Initialize HealthCheckFailedError.

        Args:
            base_url: Base URL of the probed environment
        """
        super().__init__(f"Health check failed for {base_url}", {"base_url": base_url})
        self.base_url: str = base_url
