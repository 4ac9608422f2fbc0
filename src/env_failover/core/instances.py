"""Keyed registry of independent failover controllers."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Hashable, Mapping, Sequence
from typing import TYPE_CHECKING, Final

from env_failover.core.controller import FailoverController, ListenerHandle
from env_failover.core.exceptions import UnknownInstanceError
from env_failover.types.models import Environment, EnvironmentConfig, FailoverStats

if TYPE_CHECKING:
    from env_failover.types.aliases import EnvironmentListener
    from env_failover.types.models import Response
    from env_failover.types.protocols import HTTPTransport

logger = logging.getLogger(__name__)

DEFAULT_INSTANCE_NAME: Final[str] = "default"


class FailoverInstances:
    """A default controller plus any number of named controllers.

    Every controller has its own registry, active environment, listeners and
    health check. Delegating operations act on the controller currently
    selected as default (see :meth:`set_default_instance`).

    Example:
        >>> instances = FailoverInstances()
        >>> await instances.initialize(Environment.DEVELOPMENT)
        >>> await instances.create_instance("billing", Environment.PRODUCTION)
        >>> response = await instances.http_request("/v1/invoices", instance="billing")
    """

    def __init__(
        self,
        *,
        controller_factory: Callable[[], FailoverController] = FailoverController,
        transport: HTTPTransport | None = None,
    ) -> None:
        """Initialize the instance registry.

        Args:
            controller_factory: Builds every controller (default and named)
            transport: Transport used by :meth:`http_request`; defaults to an
                aiohttp transport created on first use
        """
        self._factory: Callable[[], FailoverController] = controller_factory
        self._transport: HTTPTransport | None = transport
        self._default: FailoverController = controller_factory()
        self._instances: dict[str, FailoverController] = {}
        self._default_name: str = DEFAULT_INSTANCE_NAME

    async def initialize(
        self,
        initial_environment: Hashable = Environment.DEVELOPMENT,
        override_configs: Mapping[Hashable, EnvironmentConfig] | None = None,
        *,
        enable_health_check: bool = True,
    ) -> None:
        """Initialize the default controller."""
        await self._default.initialize(
            initial_environment,
            override_configs,
            enable_health_check=enable_health_check,
        )

    async def create_instance(
        self,
        name: str,
        initial_environment: Hashable = Environment.DEVELOPMENT,
        override_configs: Mapping[Hashable, EnvironmentConfig] | None = None,
        *,
        enable_health_check: bool = True,
    ) -> FailoverController:
        """Create and initialize a named controller.

        An existing instance with the same name is disposed and replaced.

        Args:
            name: Instance name (must not be ``"default"``)
            initial_environment: Environment made active
            override_configs: Configs replacing or extending the defaults
            enable_health_check: Probe once and start the background check

        Returns:
            The initialized controller

        Raises:
            ValueError: If ``name`` is empty or the default instance name
        """
        if not name or name == DEFAULT_INSTANCE_NAME:
            msg = f"Invalid instance name: {name!r}"
            raise ValueError(msg)

        controller = self._factory()
        await controller.initialize(
            initial_environment,
            override_configs,
            enable_health_check=enable_health_check,
        )

        previous = self._instances.get(name)
        self._instances[name] = controller
        if previous is not None:
            previous.dispose()
            logger.info("Replaced failover instance %s", name)
        else:
            logger.info("Created failover instance %s", name)
        return controller

    def get_instance(self, name: str) -> FailoverController:
        """Look up a controller by name.

        Raises:
            UnknownInstanceError: If no instance has this name
        """
        if name == DEFAULT_INSTANCE_NAME:
            return self._default
        controller = self._instances.get(name)
        if controller is None:
            raise UnknownInstanceError(name)
        return controller

    def has_instance(self, name: str) -> bool:
        return name == DEFAULT_INSTANCE_NAME or name in self._instances

    @property
    def available_instances(self) -> list[str]:
        """Names of the named instances, in creation order."""
        return list(self._instances)

    def remove_instance(self, name: str) -> None:
        """Dispose and drop a named instance. Unknown names are ignored.

        Removing the instance selected as default makes ``"default"`` the
        default again.
        """
        controller = self._instances.pop(name, None)
        if controller is None:
            return
        controller.dispose()
        if self._default_name == name:
            self._default_name = DEFAULT_INSTANCE_NAME
        logger.info("Removed failover instance %s", name)

    @property
    def default_instance_name(self) -> str:
        return self._default_name

    def set_default_instance(self, name: str) -> None:
        """Select the controller that delegating operations act on.

        Raises:
            UnknownInstanceError: If no instance has this name
        """
        if not self.has_instance(name):
            raise UnknownInstanceError(name)
        self._default_name = name

    @property
    def current(self) -> FailoverController:
        """The controller currently selected as default."""
        return self.get_instance(self._default_name)

    @property
    def current_environment(self) -> Hashable:
        return self.current.current_environment

    @property
    def current_config(self) -> EnvironmentConfig:
        return self.current.current_config

    async def switch_to(self, environment: Hashable, *, skip_health_check: bool = False) -> bool:
        """Switch the default controller to another environment."""
        return await self.current.switch_environment(environment, skip_health_check=skip_health_check)

    def on_environment_changed(self, callback: EnvironmentListener) -> ListenerHandle:
        """Register a listener on the default controller."""
        return self.current.add_listener(callback)

    async def execute_with_fallback[T](
        self,
        operation: Callable[[EnvironmentConfig], Awaitable[T]],
        fallback_order: Sequence[Hashable] | None = None,
        timeout: float | None = None,
        *,
        instance: str | None = None,
    ) -> T:
        """Run an operation with fallback on the default or a named controller."""
        controller = self.get_instance(instance) if instance is not None else self.current
        return await controller.execute_with_fallback(operation, fallback_order, timeout)

    def get_stats(self) -> FailoverStats:
        return self.current.get_stats()

    def get_all_stats(self) -> dict[str, FailoverStats]:
        """Stats of every controller keyed by instance name, ``"default"`` first."""
        stats = {DEFAULT_INSTANCE_NAME: self._default.get_stats()}
        stats.update({name: controller.get_stats() for name, controller in self._instances.items()})
        return stats

    async def http_request(
        self,
        endpoint: str,
        method: str = "GET",
        headers: Mapping[str, str] | None = None,
        body: object = None,
        instance: str | None = None,
    ) -> Response:
        """Send an HTTP request with environment fallback.

        Each attempt calls the transport with the attempted environment's
        config, so its base URL and authentication header are used.

        Args:
            endpoint: Path appended to the environment base URL
            method: HTTP method
            headers: Extra request headers
            body: Request body (JSON-encoded for mappings and lists)
            instance: Instance name; defaults to the selected default

        Returns:
            Response of the first environment that answered

        Raises:
            UnknownInstanceError: If ``instance`` does not exist
            NotInitializedError: If the controller is not initialized
        """
        transport = self._get_transport()

        async def send(config: EnvironmentConfig) -> Response:
            return await transport.request(config, endpoint, method=method, headers=headers, body=body)

        return await self.execute_with_fallback(send, instance=instance)

    def _get_transport(self) -> HTTPTransport:
        if self._transport is None:
            # core/ never imports the HTTP client at module level
            from env_failover.utils.http_client import AIOHTTPTransport

            self._transport = AIOHTTPTransport()
        return self._transport

    def dispose(self) -> None:
        """Dispose every controller. Safe to call repeatedly."""
        self._default.dispose()
        for controller in self._instances.values():
            controller.dispose()

    def reset(self) -> None:
        """Reset the default controller and drop every named instance."""
        self._default.reset()
        for controller in self._instances.values():
            controller.dispose()
        self._instances.clear()
        self._default_name = DEFAULT_INSTANCE_NAME
