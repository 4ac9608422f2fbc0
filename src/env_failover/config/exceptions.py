"""Error types for loading failover settings."""

from __future__ import annotations

from pydantic import ValidationError


class ConfigError(Exception):
    """Base exception for all configuration-related errors."""

    def __init__(self, message: str, context: dict[str, object] | None = None) -> None:
        """Initialize ConfigError.

        Args:
            message: Error message
            context: Additional context information for debugging
        """
        super().__init__(message)
        self.context: dict[str, object] = context or {}


class ConfigLoadError(ConfigError):
    """Exception raised when a settings file cannot be read or parsed."""

    def __init__(
        self,
        message: str,
        file_path: str | None = None,
        context: dict[str, object] | None = None,
    ) -> None:
        """Initialize ConfigLoadError.

        Args:
            message: Error message
            file_path: Path to the settings file that failed to load
            context: Additional context information
        """
        full_context = context or {}
        if file_path is not None:
            full_context["file_path"] = file_path

        super().__init__(message, full_context)
        self.file_path: str | None = file_path


class EnvironmentVariableError(ConfigError):
    """Exception raised when a ``${VAR}`` reference names an unset variable.

    The message names the variable, never a value.
    """

    def __init__(
        self,
        message: str,
        env_var: str | None = None,
        context: dict[str, object] | None = None,
    ) -> None:
        """Initialize EnvironmentVariableError.

        Args:
            message: Error message
            env_var: Environment variable name that caused the error
            context: Additional context information
        """
        full_context = context or {}
        if env_var is not None:
            full_context["env_var"] = env_var

        super().__init__(message, full_context)
        self.env_var: str | None = env_var


class ConfigValidationError(ConfigError):
    """Exception raised when settings fail validation."""

    def __init__(
        self,
        message: str,
        pydantic_error: ValidationError | None = None,
        context: dict[str, object] | None = None,
    ) -> None:
        """Initialize ConfigValidationError.

        Args:
            message: Error message
            pydantic_error: Original Pydantic ValidationError
            context: Additional context information
        """
        full_context = context or {}
        if pydantic_error is not None:
            full_context["validation_errors"] = self._format_validation_errors(pydantic_error)

        super().__init__(message, full_context)
        self.pydantic_error: ValidationError | None = pydantic_error

    def _format_validation_errors(self, error: ValidationError) -> list[dict[str, object]]:
        """Format Pydantic validation errors without echoing input values.

        Args:
            error: Pydantic ValidationError

        Returns:
            List of formatted error dictionaries
        """
        return [
            {
                "field": ".".join(str(loc) for loc in err["loc"]),
                "message": err["msg"],
                "type": err["type"],
            }
            for err in error.errors()
        ]
