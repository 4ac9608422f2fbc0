"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from collections.abc import AsyncIterator, Hashable

import pytest

from env_failover.core.controller import FailoverController
from env_failover.core.prober import HealthProber
from env_failover.types import Environment, EnvironmentConfig
from tests.fixtures.doubles import DEV_URL, PROD_URL, STAGING_URL, StubProbeTransport, make_config


@pytest.fixture
def env_configs() -> dict[Hashable, EnvironmentConfig]:
    """Development, staging and production configs with 10/20/30 second timeouts."""
    return {
        Environment.DEVELOPMENT: make_config(DEV_URL, timeout_seconds=10.0),
        Environment.STAGING: make_config(STAGING_URL, timeout_seconds=20.0),
        Environment.PRODUCTION: make_config(PROD_URL, timeout_seconds=30.0),
    }


@pytest.fixture
def probe_transport() -> StubProbeTransport:
    """Probe transport reporting every environment healthy."""
    return StubProbeTransport()


@pytest.fixture
def prober(probe_transport: StubProbeTransport) -> HealthProber:
    """Health prober backed by the stub transport."""
    return HealthProber(probe_transport, timeout_seconds=1.0)


@pytest.fixture
async def controller(
    prober: HealthProber,
    env_configs: dict[Hashable, EnvironmentConfig],
) -> AsyncIterator[FailoverController]:
    """Uninitialized controller seeded with the test environments."""
    failover = FailoverController(prober=prober, default_configs=env_configs)
    yield failover
    failover.dispose()


@pytest.fixture
async def initialized_controller(controller: FailoverController) -> FailoverController:
    """Controller initialized on development without background health checks."""
    await controller.initialize(Environment.DEVELOPMENT, enable_health_check=False)
    return controller
