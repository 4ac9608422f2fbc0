"""Test project structure and directory layout."""

from __future__ import annotations

import tomllib
from pathlib import Path

import pytest

from env_failover.config.loader import load_settings
from env_failover.types import Environment

# Get the project root directory
PROJECT_ROOT = Path(__file__).parent.parent
SRC_DIR = PROJECT_ROOT / "src" / "env_failover"
TESTS_DIR = PROJECT_ROOT / "tests"
EXAMPLE_SETTINGS = PROJECT_ROOT / "configs" / "examples" / "failover.yaml.example"


class TestProjectStructure:
    """Test that the project layout is in place."""

    def test_src_directory_structure(self) -> None:
        """Every subpackage exists with an __init__.py."""
        for package in ("", "config", "core", "types", "utils"):
            init_file = SRC_DIR / package / "__init__.py"
            assert init_file.is_file(), f"{init_file} should exist"

    def test_tests_directory_structure(self) -> None:
        """Test directories mirror the source packages."""
        expected_dirs = [
            "tests/fixtures",
            "tests/property",
            "tests/unit/config",
            "tests/unit/core",
            "tests/unit/types",
            "tests/unit/utils",
        ]

        for dir_path in expected_dirs:
            full_path = PROJECT_ROOT / dir_path
            assert full_path.is_dir(), f"{dir_path} should be a directory"

    def test_test_module_names_unique(self) -> None:
        """Test module basenames are unique across the suite."""
        names = [path.name for path in TESTS_DIR.rglob("test_*.py")]

        assert len(names) == len(set(names))

    def test_required_files_exist(self) -> None:
        """Required project files exist."""
        required_files = [
            "pyproject.toml",
            "noxfile.py",
            "scripts/check_transport_isolation.py",
            "tests/conftest.py",
            "configs/examples/failover.yaml.example",
        ]

        for file_path in required_files:
            assert (PROJECT_ROOT / file_path).is_file(), f"File {file_path} should exist"


class TestPyprojectToml:
    """Test pyproject.toml configuration."""

    @pytest.fixture
    def pyproject(self) -> dict[str, object]:
        with (PROJECT_ROOT / "pyproject.toml").open("rb") as f:
            return tomllib.load(f)

    def test_python_version_requirement(self, pyproject: dict[str, object]) -> None:
        """The project requires Python 3.13+."""
        project = pyproject["project"]
        assert isinstance(project, dict)
        assert project["requires-python"] == ">=3.13"

    def test_required_dependencies(self, pyproject: dict[str, object]) -> None:
        """Runtime dependencies cover HTTP, validation and YAML."""
        project = pyproject["project"]
        assert isinstance(project, dict)
        dependencies = " ".join(project["dependencies"]).lower()  # pyright: ignore[reportUnknownArgumentType]  # TOML boundary

        for dep in ("aiohttp", "pydantic", "pyyaml"):
            assert dep in dependencies, f"Dependency {dep} should be declared"


class TestExampleSettings:
    """Test that the shipped example settings load."""

    def test_example_settings_load(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """The example file validates once its variables are set."""
        for var in ("PRODUCTION_API_KEY", "STAGING_API_KEY", "STAGING_BEARER_TOKEN", "EU_WEST_API_KEY"):
            monkeypatch.setenv(var, f"{var.lower()}_value")

        settings = load_settings(EXAMPLE_SETTINGS)

        assert settings.resolved_initial_environment() is Environment.STAGING
        assert settings.resolved_fallback_order() == (Environment.STAGING, "eu-west", Environment.PRODUCTION)
        configs = settings.environment_configs()
        assert configs["eu-west"].auth_headers() == {"X-Region-Key": "eu_west_api_key_value"}
