"""Tests for the RegistryConfig class."""

import os
from unittest.mock import patch

import pytest

from schemata_registry.config import (
    DEFAULT_MAX_CONCURRENCY,
    DEFAULT_REQUEST_TIMEOUT,
    ENVIRONMENT_VARIABLES,
    RegistryConfig,
)
from schemata_registry.errors import ConfigurationError


def test_registry_config_defaults() -> None:
    """Test RegistryConfig initialization with default values."""
    config = RegistryConfig()
    assert config.schema_location is None
    assert config.templates_location is None
    assert config.max_concurrency == DEFAULT_MAX_CONCURRENCY == 8
    assert config.request_timeout == DEFAULT_REQUEST_TIMEOUT == 10.0
    assert config.coerce_types is True
    assert config.use_defaults is True
    assert config.all_errors is False


@pytest.mark.parametrize("max_concurrency", [0, -1, 257])
def test_max_concurrency_bounds(max_concurrency: int) -> None:
    """Test that max_concurrency outside 1..256 is rejected."""
    with pytest.raises(ValueError):
        RegistryConfig(max_concurrency=max_concurrency)


def test_request_timeout_must_be_positive() -> None:
    """Test that a non-positive timeout is rejected."""
    with pytest.raises(ValueError):
        RegistryConfig(request_timeout=0)


def test_from_env() -> None:
    """Test RegistryConfig populated from environment variables."""
    with patch.dict(
        os.environ,
        {
            "SCHEMA_LOCATION": "https://github.com/acme/schemas",
            "SCHEMA_GITHUB_BRANCH": "dev",
            "TEMPLATES_LOCATION": "/srv/templates",
            "TEMPLATES_GITHUB_BRANCH": "live",
            "SCHEMATA_MAX_CONCURRENCY": "4",
            "SCHEMATA_REQUEST_TIMEOUT": "2.5",
            "SCHEMATA_ALL_ERRORS": "yes",
        },
    ):
        config = RegistryConfig.from_env()

    assert config.schema_location == "https://github.com/acme/schemas"
    assert config.schema_branch == "dev"
    assert config.templates_location == "/srv/templates"
    assert config.templates_branch == "live"
    assert config.max_concurrency == 4
    assert config.request_timeout == 2.5
    assert config.all_errors is True


def test_from_env_with_explicit_mapping() -> None:
    """Test that an explicit mapping is used instead of os.environ."""
    config = RegistryConfig.from_env({"SCHEMA_LOCATION": "./schemas"})
    assert config.schema_location == "./schemas"
    assert config.max_concurrency == DEFAULT_MAX_CONCURRENCY


@pytest.mark.parametrize(
    "name, value",
    [
        ("SCHEMATA_MAX_CONCURRENCY", "many"),
        ("SCHEMATA_MAX_CONCURRENCY", "0"),
        ("SCHEMATA_REQUEST_TIMEOUT", "soon"),
        ("SCHEMATA_REQUEST_TIMEOUT", "-1"),
        ("SCHEMATA_ALL_ERRORS", "maybe"),
    ],
)
def test_from_env_malformed_values(name: str, value: str) -> None:
    """Test that malformed environment values raise ConfigurationError."""
    with pytest.raises(ConfigurationError):
        RegistryConfig.from_env({name: value})


def test_to_dict() -> None:
    """Test that to_dict reports every setting."""
    config = RegistryConfig(schema_location="./schemas", max_concurrency=2)
    data = config.to_dict()

    assert data["schema_location"] == "./schemas"
    assert data["max_concurrency"] == 2
    assert set(data) == {
        "schema_location",
        "schema_branch",
        "templates_location",
        "templates_branch",
        "max_concurrency",
        "request_timeout",
        "coerce_types",
        "use_defaults",
        "all_errors",
    }


def test_environment_variables_listed() -> None:
    """Test that every variable read by from_env is listed."""
    assert set(ENVIRONMENT_VARIABLES) == {
        "SCHEMA_LOCATION",
        "SCHEMA_GITHUB_BRANCH",
        "TEMPLATES_LOCATION",
        "TEMPLATES_GITHUB_BRANCH",
        "SCHEMATA_MAX_CONCURRENCY",
        "SCHEMATA_REQUEST_TIMEOUT",
        "SCHEMATA_ALL_ERRORS",
    }
