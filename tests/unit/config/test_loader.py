"""Tests for loading settings files and wiring controllers."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from env_failover.config.exceptions import (
    ConfigError,
    ConfigLoadError,
    ConfigValidationError,
    EnvironmentVariableError,
)
from env_failover.config.loader import (
    build_controller,
    load_settings,
    resolve_env_var,
    resolve_env_vars,
    start_controller,
)
from env_failover.config.models import FailoverSettings
from env_failover.core.controller import DEFAULT_FALLBACK_ENVIRONMENTS
from env_failover.types import Environment

SETTINGS_YAML = """
initial_environment: eu-west
enable_health_check: false
probe_timeout_seconds: 2.5
health_check_interval_seconds: 60
fallback_order: [staging, production]
environments:
  eu-west:
    base_url: https://api.eu-west.test
    api_key: ${EU_WEST_API_KEY}
    timeout_seconds: 15
  staging:
    base_url: https://api.staging.test
    api_key: staging_key
    auth_type: both
    bearer_token: ${STAGING_TOKEN}
"""


def _write(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "failover.yaml"
    _ = path.write_text(content, encoding="utf-8")
    return path


class TestEnvironmentVariables:
    """Test ${VAR} resolution."""

    def test_resolve_env_var(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """References are replaced, including several in one string."""
        monkeypatch.setenv("REGION", "eu")
        monkeypatch.setenv("TIER", "api")

        assert resolve_env_var("https://${TIER}.${REGION}.test") == "https://api.eu.test"
        assert resolve_env_var("no variables here") == "no variables here"

    def test_missing_variable(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Unset variables raise EnvironmentVariableError naming the variable."""
        monkeypatch.delenv("MISSING_KEY", raising=False)

        with pytest.raises(EnvironmentVariableError) as exc_info:
            _ = resolve_env_var("${MISSING_KEY}")

        assert exc_info.value.env_var == "MISSING_KEY"
        assert "MISSING_KEY" in str(exc_info.value)
        assert isinstance(exc_info.value, ConfigError)

    def test_resolve_nested(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Nested mappings and lists are resolved, other values kept."""
        monkeypatch.setenv("KEY", "k")

        data = {"a": {"b": ["${KEY}", 3, {"c": "${KEY}"}]}, "d": True, "e": None}

        assert resolve_env_vars(data) == {"a": {"b": ["k", 3, {"c": "k"}]}, "d": True, "e": None}


class TestLoadSettings:
    """Test reading settings files."""

    def test_load_settings(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """A complete file is parsed, resolved and validated."""
        monkeypatch.setenv("EU_WEST_API_KEY", "eu_key_from_env")
        monkeypatch.setenv("STAGING_TOKEN", "staging_token_from_env")

        settings = load_settings(_write(tmp_path, SETTINGS_YAML))

        assert settings.resolved_initial_environment() == "eu-west"
        assert settings.enable_health_check is False
        assert settings.environments["eu-west"].api_key == "eu_key_from_env"
        assert settings.environments["staging"].bearer_token == "staging_token_from_env"
        assert settings.resolved_fallback_order() == (Environment.STAGING, Environment.PRODUCTION)

    def test_empty_file_yields_defaults(self, tmp_path: Path) -> None:
        """An empty file loads the default settings."""
        assert load_settings(_write(tmp_path, "")) == FailoverSettings()

    def test_missing_file(self, tmp_path: Path) -> None:
        """A missing file raises ConfigLoadError with the path."""
        path = tmp_path / "absent.yaml"

        with pytest.raises(ConfigLoadError) as exc_info:
            _ = load_settings(path)

        assert exc_info.value.file_path == str(path)

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        """YAML syntax errors raise ConfigLoadError."""
        with pytest.raises(ConfigLoadError, match="Failed to parse YAML"):
            _ = load_settings(_write(tmp_path, "environments: [unclosed"))

    def test_non_mapping_root(self, tmp_path: Path) -> None:
        """The root of the file must be a mapping."""
        with pytest.raises(ConfigLoadError, match="Expected YAML dictionary"):
            _ = load_settings(_write(tmp_path, "- a\n- b\n"))

    def test_missing_variable_in_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Unset variables referenced by the file raise EnvironmentVariableError."""
        monkeypatch.delenv("EU_WEST_API_KEY", raising=False)
        monkeypatch.setenv("STAGING_TOKEN", "t")

        with pytest.raises(EnvironmentVariableError, match="EU_WEST_API_KEY"):
            _ = load_settings(_write(tmp_path, SETTINGS_YAML))

    def test_validation_error_is_actionable(self, tmp_path: Path) -> None:
        """Validation failures name the offending field without echoing values."""
        content = """
environments:
  eu-west:
    base_url: ftp://api.eu-west.test
    api_key: very_secret_key
"""
        with pytest.raises(ConfigValidationError) as exc_info:
            _ = load_settings(_write(tmp_path, content))

        message = str(exc_info.value)
        assert "environments → eu-west → base_url" in message
        assert "very_secret_key" not in message
        assert exc_info.value.pydantic_error is not None
        assert exc_info.value.context["file_path"] == str(tmp_path / "failover.yaml")


class TestBuildController:
    """Test wiring controllers from settings."""

    async def test_build_controller(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        """Configured environments overlay the built-in ones."""
        monkeypatch.setenv("EU_WEST_API_KEY", "eu_key")
        monkeypatch.setenv("STAGING_TOKEN", "tok")
        settings = load_settings(_write(tmp_path, SETTINGS_YAML))
        transport = AsyncMock()
        transport.health_check.return_value = True  # pyright: ignore[reportAny]  # mock object

        controller = build_controller(settings, transport)
        await controller.initialize(settings.resolved_initial_environment(), enable_health_check=False)

        assert controller.current_config.base_url == "https://api.eu-west.test"
        staging = controller.get_config(Environment.STAGING)
        assert staging is not None
        assert staging.auth_headers() == {"Authorization": "Bearer tok"}
        assert controller.get_config(Environment.PRODUCTION) is not None
        assert controller.fallback_environments == (Environment.STAGING, Environment.PRODUCTION)
        controller.dispose()

    async def test_default_fallback_environments(self) -> None:
        """Without fallback_order the built-in fallback environments apply."""
        controller = build_controller(FailoverSettings(), AsyncMock())

        assert controller.fallback_environments == DEFAULT_FALLBACK_ENVIRONMENTS

    async def test_probes_use_transport(self) -> None:
        """Switches are health checked through the given transport."""
        transport = AsyncMock()
        transport.health_check.return_value = False  # pyright: ignore[reportAny]  # mock object
        controller = await start_controller(FailoverSettings(enable_health_check=False), transport)

        assert await controller.switch_environment(Environment.STAGING) is False

        transport.health_check.assert_awaited_once()  # pyright: ignore[reportAny]  # mock method
        controller.dispose()

    async def test_start_controller_initializes(self) -> None:
        """start_controller() returns an initialized controller on the configured environment."""
        transport = AsyncMock()
        transport.health_check.return_value = True  # pyright: ignore[reportAny]  # mock object

        controller = await start_controller(FailoverSettings(initial_environment="staging"), transport)

        assert controller.current_environment == Environment.STAGING
        assert controller.get_stats().scheduler_running
        controller.dispose()
