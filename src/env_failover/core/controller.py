"""Failover state controller.

The controller owns the failover state of one group of backend environments:
the environment registry, the active environment, the environment change
listeners and the background health check. It is the only component that
mutates this state; the scheduler and the fallback executor go through its
public methods.

All mutation happens on a single asyncio event loop. There is no locking:
state only changes between await points, so a switch is never observed half
done.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable, Hashable, Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType, TracebackType
from typing import Final, Self

from env_failover.core.exceptions import NotInitializedError, UnknownEnvironmentError
from env_failover.core.executor import FallbackExecutor
from env_failover.core.prober import HealthProber
from env_failover.core.registry import EnvironmentRegistry
from env_failover.core.scheduler import DEFAULT_HEALTH_CHECK_INTERVAL_SECONDS, HealthCheckScheduler
from env_failover.types.aliases import EnvironmentListener
from env_failover.types.models import (
    Environment,
    EnvironmentConfig,
    FailoverStats,
    environment_name,
)

logger = logging.getLogger(__name__)

DEFAULT_CONFIGS: Final[Mapping[Hashable, EnvironmentConfig]] = MappingProxyType(
    {
        Environment.PRODUCTION: EnvironmentConfig(
            base_url="https://api.production.com",
            api_key="prod_key_123",
            enable_logging=False,
            enable_analytics=True,
            timeout_seconds=30.0,
            max_retries=3,
        ),
        Environment.DEVELOPMENT: EnvironmentConfig(
            base_url="https://api.dev.com",
            api_key="dev_key_456",
            enable_logging=True,
            enable_analytics=False,
            timeout_seconds=10.0,
            max_retries=1,
        ),
        Environment.STAGING: EnvironmentConfig(
            base_url="https://api.staging.com",
            api_key="staging_key_789",
            enable_logging=True,
            enable_analytics=True,
            timeout_seconds=20.0,
            max_retries=2,
        ),
    }
)

# Tried after the active environment when no fallback order is given
DEFAULT_FALLBACK_ENVIRONMENTS: Final[tuple[Hashable, ...]] = (
    Environment.STAGING,
    Environment.DEVELOPMENT,
    Environment.PRODUCTION,
)


class ListenerHandle:
    """Subscription returned by :meth:`FailoverController.add_listener`.

    Removing through the handle detaches exactly this registration, even when
    the same callback was registered more than once.
    """

    __slots__: tuple[str, ...] = ("_callback", "_controller")

    def __init__(self, controller: FailoverController, callback: EnvironmentListener) -> None:
        """Initialize the handle.

        Args:
            controller: Controller the listener is registered on
            callback: Listener callback
        """
        self._controller: FailoverController | None = controller
        self._callback: EnvironmentListener = callback

    @property
    def callback(self) -> EnvironmentListener:
        """The registered callback."""
        return self._callback

    @property
    def active(self) -> bool:
        """True until the subscription is removed."""
        return self._controller is not None

    def remove(self) -> None:
        """Detach the listener. Calling it again is a no-op."""
        controller, self._controller = self._controller, None
        if controller is not None:
            controller.remove_listener(self)

    unsubscribe = remove


@dataclass(slots=True)
class FailoverState:
    """Mutable state of one controller."""

    active: Hashable
    registry: EnvironmentRegistry = field(default_factory=EnvironmentRegistry)
    listeners: list[ListenerHandle] = field(default_factory=list)
    initialized: bool = False
    initializing: bool = False
    scheduler: HealthCheckScheduler | None = None


class FailoverController:
    """Tracks the active backend environment and switches between environments.

    Example:
        >>> controller = FailoverController()
        >>> await controller.initialize(Environment.STAGING, enable_health_check=False)
        >>> handle = controller.add_listener(lambda env: print(f"now on {env}"))
        >>> await controller.switch_environment(Environment.PRODUCTION)
        True
        >>> result = await controller.execute_with_fallback(fetch_users)
    """

    def __init__(
        self,
        *,
        prober: HealthProber | None = None,
        default_configs: Mapping[Hashable, EnvironmentConfig] | None = None,
        default_environment: Hashable = Environment.DEVELOPMENT,
        fallback_environments: Sequence[Hashable] = DEFAULT_FALLBACK_ENVIRONMENTS,
        health_check_interval: float = DEFAULT_HEALTH_CHECK_INTERVAL_SECONDS,
    ) -> None:
        """Initialize an uninitialized controller.

        Args:
            prober: Health prober; defaults to an HTTP probe of ``/health``
            default_configs: Configs seeded by :meth:`initialize` before the
                caller overrides (defaults to the built-in environments)
            default_environment: Active environment after :meth:`reset`
            fallback_environments: Environments tried after the active one
                when no explicit fallback order is given
            health_check_interval: Seconds between background health checks
        """
        self._prober: HealthProber = prober if prober is not None else HealthProber()
        self._default_configs: Mapping[Hashable, EnvironmentConfig] = (
            default_configs if default_configs is not None else DEFAULT_CONFIGS
        )
        self._default_environment: Hashable = default_environment
        self._fallback_environments: tuple[Hashable, ...] = tuple(fallback_environments)
        self._health_check_interval: float = health_check_interval
        self._state: FailoverState = FailoverState(active=default_environment)
        self._executor: FallbackExecutor = FallbackExecutor(self)
        self._listener_tasks: set[asyncio.Future[object]] = set()

    async def initialize(
        self,
        initial_environment: Hashable = Environment.DEVELOPMENT,
        override_configs: Mapping[Hashable, EnvironmentConfig] | None = None,
        *,
        enable_health_check: bool = True,
    ) -> None:
        """Initialize the controller.

        Calling it again on an initialized controller, or while another call
        is still probing, does nothing; the new arguments are ignored.

        Args:
            initial_environment: Environment made active
            override_configs: Configs replacing or extending the defaults
            enable_health_check: Probe the initial environment once and start
                the background health check
        """
        if self._state.initialized or self._state.initializing:
            logger.debug("Failover controller already initialized, ignoring initialize()")
            return

        # set before the first await so concurrent callers see it
        self._state.initializing = True
        try:
            self._state.registry.update(self._default_configs)
            if override_configs:
                self._state.registry.update(override_configs)

            self._state.active = initial_environment

            if enable_health_check:
                healthy = await self.check_current_environment()
                if not healthy:
                    logger.warning(
                        "Initial environment %s failed its health check",
                        environment_name(initial_environment),
                    )
                self._start_scheduler()

            self._state.initialized = True
        finally:
            self._state.initializing = False
        logger.info(
            "Failover controller initialized",
            extra={
                "environment": environment_name(initial_environment),
                "environments": [environment_name(env) for env in self._state.registry],
                "health_check": enable_health_check,
            },
        )

    def dispose(self) -> None:
        """Stop background work and drop all listeners.

        The registry and the active environment are kept, so
        :attr:`current_config` stays readable. Safe to call repeatedly.
        """
        scheduler, self._state.scheduler = self._state.scheduler, None
        if scheduler is not None:
            scheduler.cancel()

        for handle in self._state.listeners:
            handle._controller = None  # pyright: ignore[reportPrivateUsage]
        self._state.listeners.clear()
        if self._state.initialized:
            logger.info("Failover controller disposed")
        self._state.initialized = False

    def reset(self) -> None:
        """Dispose, clear the registry and restore the default environment."""
        self.dispose()
        self._state.registry.clear()
        self._state.active = self._default_environment

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.dispose()

    @property
    def is_initialized(self) -> bool:
        """True between :meth:`initialize` and :meth:`dispose`."""
        return self._state.initialized

    @property
    def current_environment(self) -> Hashable:
        """The active environment.

        Raises:
            NotInitializedError: If the controller is not initialized
        """
        if not self._state.initialized:
            raise NotInitializedError("current_environment")
        return self._state.active

    @property
    def current_config(self) -> EnvironmentConfig:
        """Configuration of the active environment.

        Raises:
            UnknownEnvironmentError: If the registry has no entry for it
                (only possible before initialize or after reset)
        """
        config = self._state.registry.get(self._state.active)
        if config is None:
            raise UnknownEnvironmentError(self._state.active)
        return config

    @property
    def fallback_environments(self) -> tuple[Hashable, ...]:
        """Environments tried after the active one by default."""
        return self._fallback_environments

    @property
    def environments(self) -> dict[Hashable, EnvironmentConfig]:
        """Snapshot of every registered environment config."""
        return self._state.registry.all()

    def get_config(self, environment: Hashable) -> EnvironmentConfig | None:
        """Configuration of an environment, or None if it is not registered.

        Args:
            environment: Environment identifier
        """
        return self._state.registry.get(environment)

    def get_stats(self) -> FailoverStats:
        """Snapshot of the controller state.

        Returns:
            Active environment, initialization flag, registry size, listener
            count and scheduler state
        """
        scheduler = self._state.scheduler
        return FailoverStats(
            active=environment_name(self._state.active),
            initialized=self._state.initialized,
            registry_size=len(self._state.registry),
            listener_count=len(self._state.listeners),
            scheduler_running=scheduler is not None and scheduler.is_running,
        )

    async def switch_environment(
        self,
        environment: Hashable,
        *,
        skip_health_check: bool = False,
    ) -> bool:
        """Make another environment active.

        Listeners are notified synchronously, in registration order, before
        this returns. A failing listener is logged and skipped; it neither
        stops the other listeners nor undoes the switch.

        Args:
            environment: Environment to switch to
            skip_health_check: Switch without probing the target first

        Returns:
            True if the environment is active afterwards, False if the target
            failed its health check (the active environment is unchanged)

        Raises:
            NotInitializedError: If the controller is not initialized
            UnknownEnvironmentError: If the target is not registered
        """
        if not self._state.initialized:
            raise NotInitializedError("switch_environment")

        if environment == self._state.active:
            return True

        config = self._state.registry.get(environment)
        if config is None:
            raise UnknownEnvironmentError(environment)

        if not skip_health_check and not await self._prober.probe(config):
            logger.warning(
                "Not switching to %s: environment is unhealthy",
                environment_name(environment),
            )
            return False

        previous = self._state.active
        self._state.active = environment
        self._notify_listeners(environment)

        logger.info(
            "Switched environment from %s to %s",
            environment_name(previous),
            environment_name(environment),
        )
        return True

    def add_listener(self, callback: EnvironmentListener) -> ListenerHandle:
        """Register an environment change listener.

        Args:
            callback: Called with the new environment after every switch.
                Coroutine functions are allowed; their coroutines are
                scheduled and not awaited.

        Returns:
            Handle that removes this registration
        """
        handle = ListenerHandle(self, callback)
        self._state.listeners.append(handle)
        return handle

    def remove_listener(self, listener: ListenerHandle | EnvironmentListener) -> None:
        """Remove a listener by handle or by callback identity.

        Removing by callback detaches its earliest registration. Unknown
        listeners are ignored.

        Args:
            listener: Handle returned by :meth:`add_listener` or the callback
        """
        listeners = self._state.listeners
        for index, handle in enumerate(listeners):
            if handle is listener or handle.callback == listener:
                del listeners[index]
                handle._controller = None  # pyright: ignore[reportPrivateUsage]
                return

    def _notify_listeners(self, environment: Hashable) -> None:
        for handle in list(self._state.listeners):
            try:
                result = handle.callback(environment)
            except Exception:
                logger.exception(
                    "Environment listener failed",
                    extra={"environment": environment_name(environment)},
                )
                continue

            if inspect.isawaitable(result):
                self._schedule_listener(result)

    def _schedule_listener(self, awaitable: Awaitable[object]) -> None:
        task = asyncio.ensure_future(awaitable)
        self._listener_tasks.add(task)
        task.add_done_callback(self._listener_done)

    def _listener_done(self, task: asyncio.Future[object]) -> None:
        self._listener_tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Async environment listener failed", exc_info=exc)

    async def check_current_environment(self) -> bool:
        """Probe the active environment.

        Returns:
            True if the active environment is healthy
        """
        config = self._state.registry.get(self._state.active)
        if config is None:
            logger.warning(
                "Active environment %s has no configuration to probe",
                environment_name(self._state.active),
            )
            return False
        return await self._prober.probe(config)

    async def check_all_environments(self) -> dict[Hashable, bool]:
        """Probe every registered environment concurrently.

        The active environment is not changed.

        Returns:
            Health of every registered environment
        """
        snapshot = self._state.registry.all()
        results = await asyncio.gather(*(self._prober.probe(config) for config in snapshot.values()))
        return dict(zip(snapshot, results, strict=True))

    def _start_scheduler(self) -> None:
        if self._state.scheduler is not None:
            self._state.scheduler.cancel()

        scheduler = HealthCheckScheduler(self, self._health_check_interval)
        scheduler.start()
        self._state.scheduler = scheduler

    async def execute_with_fallback[T](
        self,
        operation: Callable[[EnvironmentConfig], Awaitable[T]],
        fallback_order: Sequence[Hashable] | None = None,
        timeout: float | None = None,
    ) -> T:
        """Run an operation, falling back to other environments on failure.

        See :class:`~env_failover.core.executor.FallbackExecutor`.

        Args:
            operation: Async callable run against one environment config
            fallback_order: Environments to try, in order; defaults to the
                active environment followed by :attr:`fallback_environments`
            timeout: Bound for every attempt; defaults to the attempted
                environment's own timeout

        Returns:
            Result of the first successful attempt

        Raises:
            NotInitializedError: If the controller is not initialized
            Exception: The error of the last failed attempt
        """
        return await self._executor.execute(operation, fallback_order, timeout)
