"""Test doubles shared across the test suite."""

from __future__ import annotations

import asyncio

from env_failover.types import EnvironmentConfig

DEV_URL = "https://api.dev.test"
STAGING_URL = "https://api.staging.test"
PROD_URL = "https://api.prod.test"


class StubProbeTransport:
    """Test double for the probe transport.

    Every environment is healthy unless its base URL is listed in
    ``unhealthy_urls`` or ``healthy`` is switched off.
    """

    def __init__(self, *, healthy: bool = True) -> None:
        self.healthy: bool = healthy
        self.unhealthy_urls: set[str] = set()
        self.delay: float = 0.0
        self.fail_with: Exception | None = None
        self.calls: list[str] = []

    async def __call__(self, config: EnvironmentConfig) -> bool:
        self.calls.append(config.base_url)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail_with is not None:
            raise self.fail_with
        return self.healthy and config.base_url not in self.unhealthy_urls


class RecordingInterceptor:
    """Interceptor double recording every hook call."""

    def __init__(self, name: str = "recorder", *, fail: bool = False) -> None:
        self.name: str = name
        self.fail: bool = fail
        self.events: list[tuple[str, object]] = []

    async def before_call(self, request: object, config: EnvironmentConfig) -> None:
        _ = config
        self.events.append(("before_call", request))
        if self.fail:
            raise RuntimeError(f"{self.name} before_call failed")

    async def after_success(self, response: object, config: EnvironmentConfig) -> None:
        _ = config
        self.events.append(("after_success", response))
        if self.fail:
            raise RuntimeError(f"{self.name} after_success failed")

    async def on_error(self, error: BaseException, config: EnvironmentConfig) -> None:
        _ = config
        self.events.append(("on_error", error))
        if self.fail:
            raise RuntimeError(f"{self.name} on_error failed")


def make_config(base_url: str, *, timeout_seconds: float = 10.0, **overrides: object) -> EnvironmentConfig:
    """Create an EnvironmentConfig with test defaults."""
    config = EnvironmentConfig(base_url=base_url, api_key="test_key", timeout_seconds=timeout_seconds)
    return config.with_overrides(**overrides) if overrides else config
