"""Property-based tests for fallback walks using Hypothesis.

A walk over ``k`` environments whose first ``n`` attempts fail must switch
exactly to positions ``1..n`` and return the result of position ``n``.
"""

from __future__ import annotations

import asyncio
from collections.abc import Hashable

import pytest
from hypothesis import given, settings, strategies as st

from env_failover.core.controller import FailoverController
from env_failover.core.prober import HealthProber
from env_failover.types import EnvironmentConfig
from tests.fixtures.doubles import StubProbeTransport, make_config


@st.composite
def walk_shape(draw: st.DrawFn) -> tuple[int, int]:
    """Generate (environment count, leading failure count)."""
    count = draw(st.integers(min_value=1, max_value=6))
    failures = draw(st.integers(min_value=0, max_value=count))
    return count, failures


def _environments(count: int) -> dict[Hashable, EnvironmentConfig]:
    return {f"env-{i}": make_config(f"https://api.env-{i}.test") for i in range(count)}


async def _walk(count: int, failures: int) -> tuple[list[Hashable], list[str], object, Hashable]:
    configs = _environments(count)
    order = list(configs)
    failing = {configs[env].base_url for env in order[:failures]}
    calls: list[str] = []

    async def operation(config: EnvironmentConfig) -> str:
        calls.append(config.base_url)
        if config.base_url in failing:
            raise ConnectionError(config.base_url)
        return config.base_url

    controller = FailoverController(
        prober=HealthProber(StubProbeTransport(), timeout_seconds=1.0),
        default_configs=configs,
        default_environment=order[0],
    )
    await controller.initialize(order[0], enable_health_check=False)
    switches: list[Hashable] = []
    _ = controller.add_listener(switches.append)

    outcome: object
    try:
        outcome = await controller.execute_with_fallback(operation, order)
    except ConnectionError as exc:
        outcome = exc
    active = controller.current_environment
    controller.dispose()
    return switches, calls, outcome, active


class TestFallbackWalkInvariants:
    """Test invariants of execute_with_fallback over arbitrary walk shapes."""

    @given(walk_shape())
    @settings(max_examples=40, deadline=None)
    def test_switches_follow_failures(self, shape: tuple[int, int]) -> None:
        """n failures produce switches to exactly the next n positions, capped at the last one."""
        count, failures = shape
        order = [f"env-{i}" for i in range(count)]

        switches, calls, _, _ = asyncio.run(_walk(count, failures))

        expected_switches = order[1 : min(failures, count - 1) + 1]
        assert switches == expected_switches
        assert len(calls) == min(failures + 1, count)

    @given(walk_shape().filter(lambda shape: shape[1] < shape[0]))
    @settings(max_examples=40, deadline=None)
    def test_result_from_first_success(self, shape: tuple[int, int]) -> None:
        """The result comes from the first environment that succeeds, which is left active."""
        count, failures = shape

        _, calls, outcome, active = asyncio.run(_walk(count, failures))

        assert outcome == f"https://api.env-{failures}.test"
        assert calls[-1] == outcome
        assert active == f"env-{failures}"

    @given(st.integers(min_value=1, max_value=6))
    @settings(max_examples=20, deadline=None)
    def test_exhaustion_raises_last_error(self, count: int) -> None:
        """When every environment fails, the error of the last attempt propagates."""
        _, calls, outcome, active = asyncio.run(_walk(count, count))

        assert isinstance(outcome, ConnectionError)
        assert str(outcome) == f"https://api.env-{count - 1}.test"
        assert len(calls) == count
        assert active == f"env-{count - 1}"


@pytest.mark.parametrize("count", [2, 3])
def test_walk_without_failures_stays_put(count: int) -> None:
    """A first-attempt success neither switches nor retries."""
    switches, calls, _, active = asyncio.run(_walk(count, 0))

    assert switches == []
    assert calls == ["https://api.env-0.test"]
    assert active == "env-0"
