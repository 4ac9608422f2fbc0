"""Bounded-time health probing of a single environment."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Final

from env_failover.core.exceptions import HealthCheckFailedError
from env_failover.core.interceptors import InterceptorChain
from env_failover.utils.sanitization import sanitize_exception

if TYPE_CHECKING:
    from env_failover.types.aliases import ProbeTransport
    from env_failover.types.models import EnvironmentConfig

logger = logging.getLogger(__name__)

DEFAULT_PROBE_TIMEOUT_SECONDS: Final[float] = 5.0


class HealthProber:
    """Probes an environment through an injected transport.

    The probe timeout is fixed per prober and independent of the operation
    timeout of the environment. Every failure mode (transport exception,
    timeout, negative answer) collapses to ``False``.
    """

    def __init__(
        self,
        transport: ProbeTransport | None = None,
        *,
        timeout_seconds: float = DEFAULT_PROBE_TIMEOUT_SECONDS,
    ) -> None:
        """Initialize the prober.

        Args:
            transport: Async callable reporting whether an environment is up.
                Defaults to an HTTP GET against the environment health endpoint.
            timeout_seconds: Upper bound for a single probe
        """
        if transport is None:
            # core/ never imports the HTTP client at module level
            from env_failover.utils.http_client import AIOHTTPTransport

            transport = AIOHTTPTransport().health_check

        self._transport: ProbeTransport = transport
        self.timeout_seconds: float = timeout_seconds

    async def probe(self, config: EnvironmentConfig) -> bool:
        """Check whether an environment is healthy.

        Args:
            config: Configuration of the environment to probe

        Returns:
            True if the transport reported success within the timeout
        """
        error: BaseException
        try:
            async with asyncio.timeout(self.timeout_seconds):
                healthy = await self._transport(config)
        except TimeoutError as exc:
            logger.warning(
                "Health check for %s timed out after %.1fs",
                config.base_url,
                self.timeout_seconds,
            )
            error = exc
        except Exception as exc:
            logger.warning(
                "Health check for %s failed: %s",
                config.base_url,
                sanitize_exception(exc),
            )
            error = exc
        else:
            if healthy:
                logger.debug("Health check for %s: healthy", config.base_url)
                return True
            logger.warning("Health check for %s: unhealthy", config.base_url)
            error = HealthCheckFailedError(config.base_url)

        await InterceptorChain(config).on_error(error)
        return False
