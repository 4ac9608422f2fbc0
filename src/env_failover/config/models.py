"""Settings schema for failover controllers.

Settings are validated with Pydantic at the loading boundary and then turned
into the immutable :class:`~env_failover.types.models.EnvironmentConfig`
records the controller works with.
"""

from collections.abc import Hashable, Sequence
from typing import Annotated, Self

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from env_failover.types.models import AuthType, Environment, EnvironmentConfig
from env_failover.types.protocols import Interceptor


def resolve_environment_id(name: str) -> Hashable:
    """Map a settings name to an environment identifier.

    Names of built-in environments map to their :class:`Environment` member,
    any other name is used as-is.

    Examples:
        >>> resolve_environment_id("staging")
        <Environment.STAGING: 'staging'>
        >>> resolve_environment_id("eu-west")
        'eu-west'
    """
    try:
        return Environment(name)
    except ValueError:
        return name


class EnvironmentSettings(BaseModel):
    """Settings of one backend environment."""

    model_config: ConfigDict = ConfigDict(  # pyright: ignore[reportIncompatibleVariableOverride]
        extra="forbid",
        str_strip_whitespace=True,
    )

    base_url: Annotated[
        str,
        Field(
            min_length=1,
            description="Base URL of the environment API",
        ),
    ]
    api_key: Annotated[
        str,
        Field(
            repr=False,
            description="API key sent with every request",
        ),
    ]
    enable_logging: Annotated[
        bool,
        Field(description="Log transport calls and interceptor failures"),
    ] = False
    enable_analytics: Annotated[
        bool,
        Field(description="Analytics flag exposed to operations"),
    ] = False
    timeout_seconds: Annotated[
        float,
        Field(
            gt=0,
            description="Default bound for one operation attempt in seconds",
        ),
    ] = 30.0
    max_retries: Annotated[
        int,
        Field(
            ge=0,
            description="Retry hint for operations",
        ),
    ] = 0
    bearer_token: Annotated[
        str | None,
        Field(
            repr=False,
            description="Bearer token for bearer authentication",
        ),
    ] = None
    custom_auth_header: Annotated[
        str | None,
        Field(description="Header name replacing the default authentication header"),
    ] = None
    auth_type: Annotated[
        AuthType,
        Field(description="Authentication scheme: api_key, bearer or both"),
    ] = AuthType.API_KEY

    @field_validator("base_url", mode="after")
    @classmethod
    def validate_base_url_scheme(cls, v: str) -> str:
        """Validate that the base URL is an HTTP(S) URL.

        Raises:
            ValueError: If the URL does not start with http:// or https://
        """
        if not v.startswith(("http://", "https://")):
            msg = f"Base URL must start with http:// or https://, got: {v}"
            raise ValueError(msg)
        return v

    def to_environment_config(self, interceptors: Sequence[Interceptor] = ()) -> EnvironmentConfig:
        """Build the immutable environment config.

        Args:
            interceptors: Interceptors attached to the environment

        Returns:
            EnvironmentConfig with these settings
        """
        return EnvironmentConfig(
            base_url=self.base_url,
            api_key=self.api_key,
            enable_logging=self.enable_logging,
            enable_analytics=self.enable_analytics,
            timeout_seconds=self.timeout_seconds,
            max_retries=self.max_retries,
            bearer_token=self.bearer_token,
            custom_auth_header=self.custom_auth_header,
            auth_type=self.auth_type,
            interceptors=tuple(interceptors),
        )


class FailoverSettings(BaseModel):
    """Top-level failover settings.

    Environments listed here extend the built-in production, staging and
    development environments and replace them on a name collision.
    """

    model_config: ConfigDict = ConfigDict(  # pyright: ignore[reportIncompatibleVariableOverride]
        extra="forbid",
        str_strip_whitespace=True,
    )

    initial_environment: Annotated[
        str,
        Field(
            min_length=1,
            description="Environment made active on initialization",
        ),
    ] = Environment.DEVELOPMENT.value
    enable_health_check: Annotated[
        bool,
        Field(description="Probe on initialization and run the background health check"),
    ] = True
    probe_timeout_seconds: Annotated[
        float,
        Field(
            gt=0,
            description="Upper bound for a single health probe in seconds",
        ),
    ] = 5.0
    health_check_interval_seconds: Annotated[
        float,
        Field(
            gt=0,
            description="Delay between background health checks in seconds",
        ),
    ] = 300.0
    health_path: Annotated[
        str,
        Field(
            pattern=r"^/",
            description="Path of the health endpoint",
        ),
    ] = "/health"
    fallback_order: Annotated[
        list[str] | None,
        Field(description="Environments tried after the active one"),
    ] = None
    log_level: Annotated[
        str,
        Field(
            pattern=r"^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
            description="Logging level",
        ),
    ] = "INFO"
    environments: Annotated[
        dict[str, EnvironmentSettings],
        Field(description="Environment settings keyed by environment name"),
    ] = {}

    @model_validator(mode="after")
    def validate_environment_references(self) -> Self:
        """Validate that referenced environments are configured or built in.

        Raises:
            ValueError: If a name is neither configured nor built in
        """
        known = {env.value for env in Environment} | set(self.environments)

        if self.initial_environment not in known:
            msg = (
                f"Unknown initial environment: {self.initial_environment}. "
                f"Known environments: {', '.join(sorted(known))}"
            )
            raise ValueError(msg)

        unknown = [name for name in self.fallback_order or () if name not in known]
        if unknown:
            msg = (
                f"Unknown environment(s) in fallback_order: {', '.join(unknown)}. "
                f"Known environments: {', '.join(sorted(known))}"
            )
            raise ValueError(msg)

        return self

    def environment_configs(
        self,
        interceptors: Sequence[Interceptor] = (),
    ) -> dict[Hashable, EnvironmentConfig]:
        """Build the configured environment configs keyed by environment id.

        Args:
            interceptors: Interceptors attached to every environment
        """
        return {
            resolve_environment_id(name): settings.to_environment_config(interceptors)
            for name, settings in self.environments.items()
        }

    def resolved_initial_environment(self) -> Hashable:
        return resolve_environment_id(self.initial_environment)

    def resolved_fallback_order(self) -> tuple[Hashable, ...] | None:
        """Fallback environments as identifiers, or None when not configured."""
        if self.fallback_order is None:
            return None
        return tuple(resolve_environment_id(name) for name in self.fallback_order)
