"""HTTP transport for health probes and requests against one environment.

This module provides the default transport collaborator of the failover core:
an aiohttp-based client that applies the environment's authentication header
and runs its interceptors around every call.

Timeouts here are per-request socket timeouts taken from the environment
config; the overall attempt bound is enforced by the fallback executor and the
probe bound by the health prober.
"""

import json
import logging
from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager
from typing import Final, Self

import aiohttp

from env_failover.core.interceptors import InterceptorChain
from env_failover.types.models import EnvironmentConfig, Response, TransportRequest
from env_failover.utils.sanitization import sanitize_exception

DEFAULT_HEALTH_PATH: Final[str] = "/health"


def build_url(base_url: str, endpoint: str) -> str:
    """Join an environment base URL and an endpoint path.

    Args:
        base_url: Environment base URL
        endpoint: Path, with or without a leading slash

    Returns:
        Absolute URL

    Example:
        >>> build_url("https://api.dev.com/", "/v1/users")
        'https://api.dev.com/v1/users'
    """
    if not endpoint:
        return base_url
    return f"{base_url.rstrip('/')}/{endpoint.lstrip('/')}"


class AIOHTTPTransport:
    """Async HTTP transport implementing the HTTPTransport Protocol.

    Can be used as an async context manager, sharing one ``ClientSession``
    across calls; outside of a context a short-lived session is opened per
    call.

    Example:
        >>> async with AIOHTTPTransport() as transport:
        ...     healthy = await transport.health_check(config)
        ...     response = await transport.request(config, "/v1/users")
    """

    def __init__(
        self,
        *,
        health_path: str = DEFAULT_HEALTH_PATH,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        """Initialize the transport.

        Args:
            health_path: Path probed by :meth:`health_check`
            session: Optional externally owned session (not closed by this
                transport)
        """
        self._health_path: str = health_path
        self._session: aiohttp.ClientSession | None = session
        self._owns_session: bool = False
        self._logger: logging.Logger = logging.getLogger(__name__)

    async def __aenter__(self) -> Self:
        """Enter async context manager and create the aiohttp session.

        Returns:
            Self for context manager protocol
        """
        if self._session is None:
            self._session = aiohttp.ClientSession(json_serialize=json.dumps)
            self._owns_session = True
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Exit async context manager and close a session this transport created."""
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None
            self._owns_session = False

    async def health_check(self, config: EnvironmentConfig) -> bool:
        """Probe the health endpoint of an environment.

        Error hooks are not run here; the health prober reports probe
        failures to the interceptors.

        Args:
            config: Environment to probe

        Returns:
            True if the endpoint answered with status 200
        """
        request = self._build_request(config, self._health_path, method="GET")
        response = await self._send(config, request)
        return response.status == 200

    async def request(
        self,
        config: EnvironmentConfig,
        endpoint: str,
        *,
        method: str = "GET",
        headers: Mapping[str, str] | None = None,
        body: object = None,
        fail_on_server_error: bool = False,
    ) -> Response:
        """Send one HTTP request to an environment.

        Args:
            config: Environment to call
            endpoint: Path appended to the environment base URL
            method: HTTP method
            headers: Extra request headers (override the defaults)
            body: Request body; mappings and lists are JSON-encoded, str and
                bytes are sent as-is
            fail_on_server_error: Raise ``aiohttp.ClientResponseError`` for
                5xx responses instead of returning them

        Returns:
            HTTP response with status, body, and headers

        Raises:
            aiohttp.ClientError: For connection issues (and 5xx responses when
                ``fail_on_server_error`` is set)
            TimeoutError: If the request exceeds the environment timeout
        """
        request = self._build_request(config, endpoint, method=method, headers=headers, body=body)
        try:
            return await self._send(config, request, fail_on_server_error=fail_on_server_error)
        except Exception as exc:
            await InterceptorChain(config).on_error(exc)
            raise

    def _build_request(
        self,
        config: EnvironmentConfig,
        endpoint: str,
        *,
        method: str,
        headers: Mapping[str, str] | None = None,
        body: object = None,
    ) -> TransportRequest:
        request_headers: dict[str, str] = {}
        if body is not None:
            request_headers["Content-Type"] = "application/json"
        request_headers.update(config.auth_headers())
        if headers:
            request_headers.update(headers)

        return TransportRequest(
            method=method.upper(),
            url=build_url(config.base_url, endpoint),
            headers=request_headers,
            body=body,
        )

    async def _send(
        self,
        config: EnvironmentConfig,
        request: TransportRequest,
        *,
        fail_on_server_error: bool = False,
    ) -> Response:
        chain = InterceptorChain(config)
        await chain.before_call(request)

        if config.enable_logging:
            self._logger.debug("%s %s", request.method, request.url)

        try:
            async with self._session_scope() as session:
                async with session.request(
                    request.method,
                    request.url,
                    headers=request.headers,
                    timeout=aiohttp.ClientTimeout(total=config.timeout_seconds),
                    **_body_kwargs(request.body),
                ) as raw:
                    if fail_on_server_error and raw.status >= 500:
                        raw.raise_for_status()

                    response = Response(
                        status=raw.status,
                        body=await _read_body(raw),
                        headers=dict(raw.headers),
                    )
        except aiohttp.InvalidURL as exc:
            self._logger.error("Invalid URL: %s", request.url)
            raise ValueError(f"Malformed URL: {request.url}") from exc
        except (aiohttp.ClientError, TimeoutError) as exc:
            self._logger.warning(
                "%s %s failed: %s",
                request.method,
                request.url,
                sanitize_exception(exc),
            )
            raise

        await chain.after_success(response)
        return response

    @asynccontextmanager
    async def _session_scope(self) -> AsyncIterator[aiohttp.ClientSession]:
        if self._session is not None:
            yield self._session
            return

        async with aiohttp.ClientSession(json_serialize=json.dumps) as session:
            yield session


def _body_kwargs(body: object) -> dict[str, object]:
    if body is None:
        return {}
    if isinstance(body, (str, bytes)):
        return {"data": body}
    return {"json": body}


async def _read_body(response: aiohttp.ClientResponse) -> object:
    """Decode a response body as JSON, falling back to text."""
    try:
        return await response.json()  # pyright: ignore[reportAny]  # aiohttp returns Any
    except (aiohttp.ContentTypeError, ValueError):
        return await response.text()
