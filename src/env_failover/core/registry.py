"""Environment registry mapping identifiers to their configuration."""

from __future__ import annotations

import logging
from collections.abc import Hashable, Iterator, Mapping

from env_failover.types.models import EnvironmentConfig, environment_name

logger = logging.getLogger(__name__)


class EnvironmentRegistry:
    """Registry of environment configurations.

    Registering an identifier that already exists replaces its config.
    """

    def __init__(self, configs: Mapping[Hashable, EnvironmentConfig] | None = None) -> None:
        """Initialize the registry.

        Args:
            configs: Optional initial entries
        """
        self._configs: dict[Hashable, EnvironmentConfig] = {}
        if configs:
            self.update(configs)

    def register(self, environment: Hashable, config: EnvironmentConfig) -> None:
        """Register or replace the config of an environment.

        Args:
            environment: Environment identifier
            config: Configuration to store

        Raises:
            ValueError: If the config has an empty base URL
        """
        if not config.base_url:
            msg = f"Environment '{environment_name(environment)}' must have a non-empty base URL"
            raise ValueError(msg)

        replaced = environment in self._configs
        self._configs[environment] = config
        logger.debug(
            "%s environment config: %s",
            "Replaced" if replaced else "Registered",
            environment_name(environment),
        )

    def update(self, configs: Mapping[Hashable, EnvironmentConfig]) -> None:
        """Register several configs, replacing existing entries on collision.

        Args:
            configs: Mapping of environment identifiers to configs
        """
        for environment, config in configs.items():
            self.register(environment, config)

    def get(self, environment: Hashable) -> EnvironmentConfig | None:
        """Look up the config of an environment.

        Args:
            environment: Environment identifier

        Returns:
            The registered config or None
        """
        return self._configs.get(environment)

    def all(self) -> dict[Hashable, EnvironmentConfig]:
        """Snapshot of all registered configs.

        Returns:
            Copy of the registry contents
        """
        return dict(self._configs)

    def clear(self) -> None:
        """Remove every entry."""
        self._configs.clear()

    def __contains__(self, environment: object) -> bool:
        return environment in self._configs

    def __len__(self) -> int:
        return len(self._configs)

    def __iter__(self) -> Iterator[Hashable]:
        return iter(list(self._configs))
