"""Tests for the environment registry."""

from __future__ import annotations

import pytest

from env_failover.core.registry import EnvironmentRegistry
from env_failover.types import Environment
from tests.fixtures.doubles import DEV_URL, STAGING_URL, make_config


class TestRegister:
    """Test registering environment configs."""

    def test_register_and_get(self) -> None:
        """Registered configs are returned by get()."""
        registry = EnvironmentRegistry()
        config = make_config(DEV_URL)

        registry.register(Environment.DEVELOPMENT, config)

        assert registry.get(Environment.DEVELOPMENT) == config
        assert Environment.DEVELOPMENT in registry
        assert len(registry) == 1

    def test_register_overwrites_existing_entry(self) -> None:
        """Registering an existing id replaces its config."""
        registry = EnvironmentRegistry()
        registry.register(Environment.DEVELOPMENT, make_config(DEV_URL))
        replacement = make_config(STAGING_URL, timeout_seconds=5.0)

        registry.register(Environment.DEVELOPMENT, replacement)

        assert registry.get(Environment.DEVELOPMENT) == replacement
        assert len(registry) == 1

    def test_register_rejects_empty_base_url(self) -> None:
        """A config without a base URL is rejected."""
        registry = EnvironmentRegistry()

        with pytest.raises(ValueError, match="non-empty base URL"):
            registry.register("broken", make_config(""))

        assert "broken" not in registry

    def test_custom_identifiers_are_supported(self) -> None:
        """Any hashable value can identify an environment."""
        registry = EnvironmentRegistry()
        registry.register("eu-west", make_config(DEV_URL))
        registry.register(("region", 2), make_config(STAGING_URL))

        assert registry.get("eu-west") is not None
        assert registry.get(("region", 2)) is not None


class TestLookup:
    """Test read access to the registry."""

    def test_get_unknown_returns_none(self) -> None:
        """Looking up an unknown id never raises."""
        assert EnvironmentRegistry().get(Environment.PRODUCTION) is None

    def test_all_returns_copy(self) -> None:
        """Mutating the snapshot does not change the registry."""
        registry = EnvironmentRegistry({Environment.DEVELOPMENT: make_config(DEV_URL)})

        snapshot = registry.all()
        snapshot.clear()

        assert len(registry) == 1

    def test_update_overlays_entries(self) -> None:
        """update() adds new entries and replaces colliding ones."""
        registry = EnvironmentRegistry({Environment.DEVELOPMENT: make_config(DEV_URL)})
        override = make_config("https://override.test")

        registry.update({Environment.DEVELOPMENT: override, Environment.STAGING: make_config(STAGING_URL)})

        assert registry.get(Environment.DEVELOPMENT) == override
        assert set(registry) == {Environment.DEVELOPMENT, Environment.STAGING}

    def test_iteration_tolerates_mutation(self) -> None:
        """Iterating over the registry while registering does not fail."""
        registry = EnvironmentRegistry({Environment.DEVELOPMENT: make_config(DEV_URL)})

        for environment in registry:
            registry.register(f"{environment}-copy", make_config(DEV_URL))

        assert len(registry) == 2

    def test_clear(self) -> None:
        """clear() removes every entry."""
        registry = EnvironmentRegistry({Environment.DEVELOPMENT: make_config(DEV_URL)})
        registry.clear()

        assert len(registry) == 0
        assert registry.get(Environment.DEVELOPMENT) is None
