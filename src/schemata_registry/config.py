"""Configuration for the schemata registry.

Resource locations are provided per family (schemas, templates) through
environment variables; everything else has a sensible default.
"""

import os
from typing import Mapping, Optional

from .errors import ConfigurationError

# Environment variable names
ENV_SCHEMA_LOCATION = "SCHEMA_LOCATION"
ENV_SCHEMA_BRANCH = "SCHEMA_GITHUB_BRANCH"
ENV_TEMPLATES_LOCATION = "TEMPLATES_LOCATION"
ENV_TEMPLATES_BRANCH = "TEMPLATES_GITHUB_BRANCH"
ENV_MAX_CONCURRENCY = "SCHEMATA_MAX_CONCURRENCY"
ENV_REQUEST_TIMEOUT = "SCHEMATA_REQUEST_TIMEOUT"
ENV_ALL_ERRORS = "SCHEMATA_ALL_ERRORS"

ENVIRONMENT_VARIABLES = [
    ENV_SCHEMA_LOCATION,
    ENV_SCHEMA_BRANCH,
    ENV_TEMPLATES_LOCATION,
    ENV_TEMPLATES_BRANCH,
    ENV_MAX_CONCURRENCY,
    ENV_REQUEST_TIMEOUT,
    ENV_ALL_ERRORS,
]

DEFAULT_MAX_CONCURRENCY = 8
DEFAULT_REQUEST_TIMEOUT = 10.0

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off", "")


class RegistryConfig:
    """Configuration for the schema and template registries."""

    def __init__(
        self,
        schema_location: Optional[str] = None,
        schema_branch: Optional[str] = None,
        templates_location: Optional[str] = None,
        templates_branch: Optional[str] = None,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
        coerce_types: bool = True,
        use_defaults: bool = True,
        all_errors: bool = False,
    ):
        """Initialize registry configuration.

        Args:
            schema_location: Local path or GitHub URL of the schema tree.
            schema_branch: Branch used when the schema URL does not name one.
            templates_location: Local path or GitHub URL of the template tree.
            templates_branch: Branch used when the template URL does not name one.
            max_concurrency: Upper bound on concurrent fetches during bulk loads.
            request_timeout: Timeout in seconds for remote fetches.
            coerce_types: Whether validation coerces scalar values to the declared type.
            use_defaults: Whether validation fills in schema defaults.
            all_errors: Whether validation reports every error instead of the first.
        """
        self.schema_location = schema_location
        self.schema_branch = schema_branch
        self.templates_location = templates_location
        self.templates_branch = templates_branch

        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        if max_concurrency > 256:
            raise ValueError("max_concurrency must not exceed 256")
        self.max_concurrency = max_concurrency

        if request_timeout <= 0:
            raise ValueError("request_timeout must be positive")
        self.request_timeout = request_timeout

        self.coerce_types = coerce_types
        self.use_defaults = use_defaults
        self.all_errors = all_errors

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "RegistryConfig":
        """Build a configuration from environment variables.

        Args:
            environ: Mapping to read from, defaults to ``os.environ``

        Returns:
            RegistryConfig populated from the environment

        Raises:
            ConfigurationError: If a numeric or boolean variable is malformed
        """
        env = os.environ if environ is None else environ

        try:
            max_concurrency = int(env.get(ENV_MAX_CONCURRENCY) or DEFAULT_MAX_CONCURRENCY)
        except ValueError:
            raise ConfigurationError(
                f"{ENV_MAX_CONCURRENCY} must be an integer, got {env.get(ENV_MAX_CONCURRENCY)!r}",
                env_name=ENV_MAX_CONCURRENCY,
            )

        try:
            request_timeout = float(env.get(ENV_REQUEST_TIMEOUT) or DEFAULT_REQUEST_TIMEOUT)
        except ValueError:
            raise ConfigurationError(
                f"{ENV_REQUEST_TIMEOUT} must be a number, got {env.get(ENV_REQUEST_TIMEOUT)!r}",
                env_name=ENV_REQUEST_TIMEOUT,
            )

        all_errors_raw = (env.get(ENV_ALL_ERRORS) or "").strip().lower()
        if all_errors_raw in _TRUE_VALUES:
            all_errors = True
        elif all_errors_raw in _FALSE_VALUES:
            all_errors = False
        else:
            raise ConfigurationError(
                f"{ENV_ALL_ERRORS} must be a boolean, got {env.get(ENV_ALL_ERRORS)!r}",
                env_name=ENV_ALL_ERRORS,
            )

        try:
            return cls(
                schema_location=env.get(ENV_SCHEMA_LOCATION),
                schema_branch=env.get(ENV_SCHEMA_BRANCH),
                templates_location=env.get(ENV_TEMPLATES_LOCATION),
                templates_branch=env.get(ENV_TEMPLATES_BRANCH),
                max_concurrency=max_concurrency,
                request_timeout=request_timeout,
                all_errors=all_errors,
            )
        except ValueError as e:
            raise ConfigurationError(str(e))

    def to_dict(self) -> dict:
        """Return the configuration as a plain dictionary."""
        return {
            "schema_location": self.schema_location,
            "schema_branch": self.schema_branch,
            "templates_location": self.templates_location,
            "templates_branch": self.templates_branch,
            "max_concurrency": self.max_concurrency,
            "request_timeout": self.request_timeout,
            "coerce_types": self.coerce_types,
            "use_defaults": self.use_defaults,
            "all_errors": self.all_errors,
        }
