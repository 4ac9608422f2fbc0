"""Protocol definitions for component interfaces.

This module defines structural subtyping protocols that establish the
contracts between the failover core and its collaborators (interceptors and
transports) without requiring inheritance.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from env_failover.types.models import EnvironmentConfig, Response, TransportRequest


@runtime_checkable
class Interceptor(Protocol):
    """Side-effect hooks invoked around a transport call.

    Hooks are awaited in registration order. A failing hook never affects the
    call it decorates nor the hooks registered after it.
    """

    async def before_call(self, request: TransportRequest, config: EnvironmentConfig) -> None:
        """Run before the request is sent.

        Args:
            request: Outgoing request (headers may be modified in place)
            config: Configuration of the environment being called
        """
        ...

    async def after_success(self, response: Response, config: EnvironmentConfig) -> None:
        """Run after a response has been received.

        Args:
            response: Received response
            config: Configuration of the environment being called
        """
        ...

    async def on_error(self, error: BaseException, config: EnvironmentConfig) -> None:
        """Run when the call failed.

        Args:
            error: Failure raised by the transport, or a health check failure
            config: Configuration of the environment being called
        """
        ...


class HTTPTransport(Protocol):
    """Protocol for the HTTP transport used by the request helper."""

    async def health_check(self, config: EnvironmentConfig) -> bool:
        """Probe the health endpoint of one environment.

        Args:
            config: Environment to probe

        Returns:
            True if the environment answered with a success status
        """
        ...

    async def request(
        self,
        config: EnvironmentConfig,
        endpoint: str,
        *,
        method: str = "GET",
        headers: Mapping[str, str] | None = None,
        body: object = None,
    ) -> Response:
        """Send one HTTP request to an environment.

        Args:
            config: Environment to call
            endpoint: Path appended to the environment base URL
            method: HTTP method
            headers: Extra request headers
            body: Request body; mappings and lists are JSON-encoded

        Returns:
            HTTP response with status, body, and headers
        """
        ...
