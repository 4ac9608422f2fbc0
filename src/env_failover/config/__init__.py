"""Settings loading and validation for failover controllers."""

from env_failover.config.exceptions import (
    ConfigError,
    ConfigLoadError,
    ConfigValidationError,
    EnvironmentVariableError,
)
from env_failover.config.loader import (
    build_controller,
    load_settings,
    start_controller,
)
from env_failover.config.models import (
    EnvironmentSettings,
    FailoverSettings,
    resolve_environment_id,
)

__all__ = [
    # Exception classes
    "ConfigError",
    "ConfigLoadError",
    "ConfigValidationError",
    "EnvironmentVariableError",
    # Settings models
    "EnvironmentSettings",
    "FailoverSettings",
    "resolve_environment_id",
    # Loading
    "build_controller",
    "load_settings",
    "start_controller",
]
