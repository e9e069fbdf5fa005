"""CLI utilities package."""

from .helpers import (
    ExitCode,
    configure_logging,
    exit_code_for,
    get_env_vars,
    get_registry_context,
    handle_error,
    load_metadata_file,
    resolve_format,
    resolve_log_level,
    validate_format_support,
)
from .output import emit

__all__ = [
    "ExitCode",
    "resolve_format",
    "resolve_log_level",
    "configure_logging",
    "exit_code_for",
    "handle_error",
    "get_registry_context",
    "get_env_vars",
    "load_metadata_file",
    "validate_format_support",
    "emit",
]
