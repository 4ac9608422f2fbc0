"""Interceptor hooks invoked around transport calls."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from env_failover.utils.sanitization import sanitize_exception

if TYPE_CHECKING:
    from env_failover.types.models import EnvironmentConfig, Response, TransportRequest
    from env_failover.types.protocols import Interceptor

logger = logging.getLogger(__name__)


class BaseInterceptor:
    """Interceptor with no-op hooks; subclass and override what you need."""

    async def before_call(self, request: TransportRequest, config: EnvironmentConfig) -> None:
        """Run before the request is sent."""

    async def after_success(self, response: Response, config: EnvironmentConfig) -> None:
        """Run after a response has been received."""

    async def on_error(self, error: BaseException, config: EnvironmentConfig) -> None:
        """Run when the call failed."""


class InterceptorChain:
    """Runs one hook across every interceptor of an environment config.

    Each hook is isolated: its failure is logged (when the config enables
    logging) and swallowed, and the remaining interceptors still run.
    """

    def __init__(self, config: EnvironmentConfig) -> None:
        """Initialize the chain.

        Args:
            config: Environment whose interceptors are invoked
        """
        self._config: EnvironmentConfig = config

    @property
    def interceptors(self) -> tuple[Interceptor, ...]:
        """Interceptors in registration order."""
        return self._config.interceptors

    async def before_call(self, request: TransportRequest) -> None:
        """Invoke every ``before_call`` hook.

        Args:
            request: Outgoing request
        """
        for interceptor in self._config.interceptors:
            await self._run("before_call", lambda: interceptor.before_call(request, self._config))

    async def after_success(self, response: Response) -> None:
        """Invoke every ``after_success`` hook.

        Args:
            response: Received response
        """
        for interceptor in self._config.interceptors:
            await self._run("after_success", lambda: interceptor.after_success(response, self._config))

    async def on_error(self, error: BaseException) -> None:
        """Invoke every ``on_error`` hook.

        Args:
            error: Failure of the decorated call
        """
        for interceptor in self._config.interceptors:
            await self._run("on_error", lambda: interceptor.on_error(error, self._config))

    async def _run(self, hook: str, call: Callable[[], Awaitable[None]]) -> None:
        try:
            await call()
        except Exception as exc:
            if self._config.enable_logging:
                logger.warning(
                    "Interceptor %s hook failed: %s",
                    hook,
                    sanitize_exception(exc),
                    extra={"hook": hook, "base_url": self._config.base_url},
                )
