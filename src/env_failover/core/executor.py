"""Fallback execution of an operation across an ordered list of environments."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Hashable, Sequence
from typing import TYPE_CHECKING

from env_failover.core.exceptions import (
    AllEnvironmentsFailedError,
    NotInitializedError,
    OperationTimeoutError,
    UnknownEnvironmentError,
)
from env_failover.types.models import EnvironmentConfig, environment_name
from env_failover.utils.logging import correlation_scope
from env_failover.utils.sanitization import sanitize_exception

if TYPE_CHECKING:
    from env_failover.core.controller import FailoverController

logger = logging.getLogger(__name__)


class FallbackExecutor:
    """Runs an operation against environments in order until one succeeds.

    Attempts are strictly sequential. After a failed attempt, unless the failed
    environment equals the last entry of the order, the controller is asked to
    switch (health checked) to the entry following the first occurrence of the
    failed environment. The walk itself always moves on to the next position,
    whether or not the switch went through. The successful attempt does not
    switch. With duplicate ids the active environment can therefore differ from
    the one that produced the result: ``[dev, staging, dev, prod]`` failing on
    dev and staging switches to staging, dev and staging again, and ends on
    staging while prod answered.

    Each attempt is bounded by the explicit timeout, or else by the attempted
    environment's own ``timeout_seconds``. Only the waiting is bounded: work
    the operation already sent to a backend is not rolled back.
    """

    def __init__(self, controller: FailoverController) -> None:
        """Initialize the executor.

        Args:
            controller: Controller providing configs and performing switches
        """
        self._controller: FailoverController = controller

    async def execute[T](
        self,
        operation: Callable[[EnvironmentConfig], Awaitable[T]],
        fallback_order: Sequence[Hashable] | None = None,
        timeout: float | None = None,
    ) -> T:
        """Run ``operation`` with automatic fallback.

        Args:
            operation: Async callable run against one environment config
            fallback_order: Environments to try; defaults to the active
                environment followed by the controller's fallback environments
                (duplicates are tried again)
            timeout: Bound in seconds for every attempt

        Returns:
            Result of the first successful attempt

        Raises:
            NotInitializedError: If the controller is not initialized
            Exception: The error of the last failed attempt when every
                environment failed
            AllEnvironmentsFailedError: If no environment of the order is
                registered
        """
        controller = self._controller
        if not controller.is_initialized:
            raise NotInitializedError("execute_with_fallback")

        order: list[Hashable] = (
            list(fallback_order)
            if fallback_order is not None
            else [controller.current_environment, *controller.fallback_environments]
        )
        last_error: Exception | None = None

        with correlation_scope():
            for index, environment in enumerate(order):
                config = controller.get_config(environment)
                if config is None:
                    logger.debug(
                        "Skipping unregistered environment %s",
                        environment_name(environment),
                    )
                    continue

                bound = timeout if timeout is not None else config.timeout_seconds
                try:
                    return await self._attempt(operation, environment, config, bound)
                except Exception as exc:
                    last_error = exc
                    logger.warning(
                        "Operation failed on environment %s: %s",
                        environment_name(environment),
                        sanitize_exception(exc),
                        extra={"attempt": index + 1, "attempts": len(order)},
                    )

                # next is taken after the first occurrence of the failed id
                if environment != order[-1]:
                    await self._advance(order[order.index(environment) + 1])

            if last_error is not None:
                logger.error(
                    "All %d fallback attempts failed",
                    len(order),
                    extra={"order": [environment_name(env) for env in order]},
                )
                raise last_error

        raise AllEnvironmentsFailedError(order)

    async def _attempt[T](
        self,
        operation: Callable[[EnvironmentConfig], Awaitable[T]],
        environment: Hashable,
        config: EnvironmentConfig,
        timeout_seconds: float,
    ) -> T:
        logger.debug(
            "Running operation on environment %s (timeout=%.1fs)",
            environment_name(environment),
            timeout_seconds,
        )
        deadline = asyncio.timeout(timeout_seconds)
        try:
            async with deadline:
                return await operation(config)
        except TimeoutError as exc:
            if deadline.expired():
                raise OperationTimeoutError(environment, timeout_seconds) from exc
            raise

    async def _advance(self, environment: Hashable) -> None:
        try:
            switched = await self._controller.switch_environment(environment)
        except UnknownEnvironmentError:
            logger.debug(
                "Next fallback environment %s is not registered",
                environment_name(environment),
            )
            return

        if not switched:
            logger.warning(
                "Could not switch to fallback environment %s, trying it anyway",
                environment_name(environment),
            )
