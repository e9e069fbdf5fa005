"""CLI formatters package."""

from .json import (
    format_catalog_json,
    format_env_vars_json,
    format_json,
    format_load_results_json,
    format_location_json,
    format_matches_json,
    format_templates_json,
    format_validation_json,
)
from .table import (
    create_console,
    format_catalog_table,
    format_env_vars_table,
    format_errors_table,
    format_load_results_table,
    format_location_table,
    format_matches_table,
    format_templates_table,
)
from .yaml import format_yaml

__all__ = [
    "format_json",
    "format_yaml",
    "format_location_json",
    "format_catalog_json",
    "format_load_results_json",
    "format_validation_json",
    "format_matches_json",
    "format_templates_json",
    "format_env_vars_json",
    "create_console",
    "format_location_table",
    "format_catalog_table",
    "format_load_results_table",
    "format_errors_table",
    "format_matches_table",
    "format_templates_table",
    "format_env_vars_table",
]
