"""Recurring background health check of the active environment."""

from __future__ import annotations

import asyncio
import logging
import weakref
from typing import TYPE_CHECKING, Final

from env_failover.utils.sanitization import sanitize_exception

if TYPE_CHECKING:
    from env_failover.core.controller import FailoverController

logger = logging.getLogger(__name__)

DEFAULT_HEALTH_CHECK_INTERVAL_SECONDS: Final[float] = 300.0


class HealthCheckScheduler:
    """Periodically re-probes the active environment of a controller.

    The scheduler only holds a weak reference to its controller and never
    touches controller state itself; results are only logged.
    """

    def __init__(
        self,
        controller: FailoverController,
        interval_seconds: float = DEFAULT_HEALTH_CHECK_INTERVAL_SECONDS,
    ) -> None:
        """Initialize the scheduler.

        Args:
            controller: Controller whose active environment is probed
            interval_seconds: Delay between two probes
        """
        self._controller_ref: weakref.ReferenceType[FailoverController] = weakref.ref(controller)
        self.interval_seconds: float = interval_seconds
        self._task: asyncio.Task[None] | None = None
        self._stopped: bool = True

    @property
    def is_running(self) -> bool:
        """True while the background task is alive."""
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the recurring check, replacing any running one.

        Must be called from within a running event loop.
        """
        self.cancel()
        self._stopped = False
        self._task = asyncio.create_task(self._run(), name="env-failover-health-check")
        logger.info("Started health check scheduler (interval=%.1fs)", self.interval_seconds)

    def cancel(self) -> None:
        """Cancel the recurring check.

        No probe starts after this returns.
        """
        self._stopped = True
        if self._task is None:
            return

        task, self._task = self._task, None
        if not task.done():
            _ = task.cancel()
            logger.info("Stopped health check scheduler")

    async def stop(self) -> None:
        """Cancel the recurring check and wait for the task to finish."""
        task = self._task
        self.cancel()
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                pass

    async def _run(self) -> None:
        while not self._stopped:
            await asyncio.sleep(self.interval_seconds)
            if self._stopped:
                return

            controller = self._controller_ref()
            if controller is None:
                logger.debug("Controller was garbage collected, stopping health checks")
                return

            try:
                healthy = await controller.check_current_environment()
            except Exception as exc:
                logger.error("Error in health check loop: %s", sanitize_exception(exc))
                continue
            finally:
                # no strong reference is held while sleeping
                del controller

            if not healthy:
                logger.warning("Scheduled health check found the active environment unhealthy")
