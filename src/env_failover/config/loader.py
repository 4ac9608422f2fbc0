"""Loading of failover settings from YAML files.

Settings files are parsed with ``yaml.safe_load``, ``${VARIABLE_NAME}``
references are resolved from the process environment, and the result is
validated against :class:`FailoverSettings` with actionable error messages.
"""

import logging
import os
import re
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Final

import yaml
from pydantic import ValidationError

from env_failover.config.exceptions import (
    ConfigLoadError,
    ConfigValidationError,
    EnvironmentVariableError,
)
from env_failover.config.models import FailoverSettings, resolve_environment_id
from env_failover.core.controller import DEFAULT_CONFIGS, DEFAULT_FALLBACK_ENVIRONMENTS, FailoverController
from env_failover.core.prober import HealthProber
from env_failover.types.protocols import HTTPTransport, Interceptor
from env_failover.utils.http_client import AIOHTTPTransport

__all__ = [
    "ENV_VAR_PATTERN",
    "build_controller",
    "load_settings",
    "resolve_env_var",
    "resolve_env_vars",
    "resolve_environment_id",
    "start_controller",
]

logger = logging.getLogger(__name__)

# Matches ${VARIABLE_NAME}; names use upper-case letters, digits and underscores
ENV_VAR_PATTERN: Final[re.Pattern[str]] = re.compile(r"\$\{([A-Z0-9_]+)\}")


def resolve_env_var(value: str) -> str:
    """Resolve environment variable references in a string value.

    Args:
        value: String potentially containing ``${VARIABLE_NAME}`` references

    Returns:
        String with environment variables resolved

    Raises:
        EnvironmentVariableError: If a referenced variable is not set

    Examples:
        >>> os.environ["PROD_API_KEY"] = "prod_key_123"
        >>> resolve_env_var("${PROD_API_KEY}")
        'prod_key_123'
        >>> resolve_env_var("https://api.${REGION}.example.com")  # REGION unset
        Traceback (most recent call last):
        ...
        EnvironmentVariableError: Required environment variable 'REGION' is not set. ...
    """

    def replace_match(match: re.Match[str]) -> str:
        var_name = match.group(1)
        env_value = os.environ.get(var_name)
        if env_value is None:
            msg = (
                f"Required environment variable '{var_name}' is not set. "
                f"Please set this variable before loading the settings."
            )
            raise EnvironmentVariableError(msg, env_var=var_name)
        return env_value

    return ENV_VAR_PATTERN.sub(replace_match, value)


def resolve_env_vars(data: object) -> object:
    """Recursively resolve environment variables in YAML data.

    Strings are resolved, mappings and lists are traversed, and every other
    value is preserved as-is.

    Args:
        data: Parsed YAML data

    Returns:
        New data structure with environment variables resolved

    Raises:
        EnvironmentVariableError: If a referenced variable is not set
    """
    if isinstance(data, str):
        return resolve_env_var(data)
    if isinstance(data, Mapping):
        # YAML data is untyped at load time; validated by Pydantic after resolution
        return {key: resolve_env_vars(value) for key, value in data.items()}  # pyright: ignore[reportUnknownVariableType]  # YAML boundary
    if isinstance(data, list):
        return [resolve_env_vars(item) for item in data]  # pyright: ignore[reportUnknownVariableType]  # YAML boundary
    return data


def load_settings(path: Path | str) -> FailoverSettings:
    """Load and validate failover settings from a YAML file.

    An empty file yields the default settings.

    Args:
        path: Path to the settings YAML file

    Returns:
        Validated FailoverSettings instance

    Raises:
        ConfigLoadError: If the file is missing, unreadable or not a YAML mapping
        EnvironmentVariableError: If a referenced variable is not set
        ConfigValidationError: If the settings are invalid

    Examples:
        >>> settings = load_settings(Path("config/failover.yaml"))
        >>> settings.resolved_initial_environment()
        <Environment.STAGING: 'staging'>
    """
    config_path = Path(path)
    if not config_path.exists():
        msg = (
            f"Settings file not found: {config_path}\n"
            f"Please create a settings file at this location."
        )
        raise ConfigLoadError(msg, file_path=str(config_path))

    try:
        with config_path.open("r", encoding="utf-8") as f:
            raw_data: object = yaml.safe_load(f)  # pyright: ignore[reportAny]  # YAML boundary
    except yaml.YAMLError as e:
        msg = (
            f"Failed to parse YAML settings file: {config_path}\n"
            f"YAML parsing error: {e}\n"
            f"Please check the file for syntax errors."
        )
        raise ConfigLoadError(msg, file_path=str(config_path)) from e
    except OSError as e:
        msg = f"Failed to read settings file: {config_path}\nError: {e}\nPlease check file permissions."
        raise ConfigLoadError(msg, file_path=str(config_path)) from e

    if raw_data is None:
        raw_data = {}

    if not isinstance(raw_data, dict):
        msg = (
            f"Invalid settings file format: {config_path}\n"
            f"Expected YAML dictionary at root level, got: {type(raw_data).__name__}"
        )
        raise ConfigLoadError(msg, file_path=str(config_path))

    resolved_data = resolve_env_vars(raw_data)

    try:
        settings = FailoverSettings.model_validate(resolved_data)
    except ValidationError as e:
        error_lines = ["Settings validation failed:", ""]
        for error in e.errors():
            field_path = " → ".join(str(loc) for loc in error["loc"])
            error_lines.append(f"  Field: {field_path}")
            error_lines.append(f"  Error: {error['msg']}")
            error_lines.append(f"  Type: {error['type']}")
            error_lines.append("")

        error_lines.append(f"Settings file: {config_path}")
        error_lines.append("Please fix the above errors and try again.")

        msg = "\n".join(error_lines)
        raise ConfigValidationError(msg, pydantic_error=e, context={"file_path": str(config_path)}) from e

    logger.debug(
        "Loaded failover settings",
        extra={"file_path": str(config_path), "environments": list(settings.environments)},
    )
    return settings


def build_controller(
    settings: FailoverSettings,
    transport: HTTPTransport | None = None,
    *,
    interceptors: Sequence[Interceptor] = (),
) -> FailoverController:
    """Wire an uninitialized controller from settings.

    Configured environments are overlaid on the built-in ones.

    Args:
        settings: Validated settings
        transport: Transport used for health probes; defaults to an aiohttp
            transport probing ``settings.health_path``
        interceptors: Interceptors attached to every configured environment

    Returns:
        Controller ready for ``initialize()``
    """
    if transport is None:
        transport = AIOHTTPTransport(health_path=settings.health_path)

    prober = HealthProber(transport.health_check, timeout_seconds=settings.probe_timeout_seconds)
    fallback_order = settings.resolved_fallback_order()

    return FailoverController(
        prober=prober,
        default_configs={**DEFAULT_CONFIGS, **settings.environment_configs(interceptors)},
        fallback_environments=fallback_order if fallback_order is not None else DEFAULT_FALLBACK_ENVIRONMENTS,
        health_check_interval=settings.health_check_interval_seconds,
    )


async def start_controller(
    settings: FailoverSettings,
    transport: HTTPTransport | None = None,
    *,
    interceptors: Sequence[Interceptor] = (),
) -> FailoverController:
    """Build a controller from settings and initialize it.

    Args:
        settings: Validated settings
        transport: Transport used for health probes
        interceptors: Interceptors attached to every configured environment

    Returns:
        Initialized controller
    """
    controller = build_controller(settings, transport, interceptors=interceptors)
    await controller.initialize(
        settings.resolved_initial_environment(),
        enable_health_check=settings.enable_health_check,
    )
    return controller
