"""Helper functions for CLI operations."""

import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import click
import yaml
from rich.console import Console
from rich.logging import RichHandler

from ...config import ENVIRONMENT_VARIABLES, RegistryConfig
from ...context import RegistryContext
from ...errors import (
    CatalogUnavailableError,
    ConfigurationError,
    RetrievalError,
    SchemaNotFoundError,
    TemplateNotFoundError,
)
from ...logging import ROOT_LOGGER_NAME


class ExitCode:
    """Standard exit codes for the CLI."""

    SUCCESS = 0
    GENERIC_ERROR = 1
    INVALID_USAGE = 2
    NOT_FOUND = 3
    DATA_SOURCE_ERROR = 4
    VALIDATION_FAILED = 5


def resolve_format(cli_format: Optional[str] = None, default_tty: str = "table", default_non_tty: str = "json") -> str:
    """Resolve output format with TTY detection.

    Args:
        cli_format: Format specified via CLI flag
        default_tty: Default format for TTY output
        default_non_tty: Default format for non-TTY output

    Returns:
        Resolved format name
    """
    if cli_format:
        return cli_format.lower()

    # Auto-detect based on TTY
    if sys.stdout.isatty():
        return default_tty
    else:
        return default_non_tty


def resolve_log_level(verbose: int = 0, quiet: int = 0, debug: bool = False) -> str:
    """Map the verbosity flags to a logging level name."""
    if debug:
        return "DEBUG"
    if verbose > quiet:
        return "DEBUG" if verbose - quiet >= 2 else "INFO"
    if quiet > verbose:
        return "CRITICAL" if quiet - verbose >= 2 else "ERROR"
    return "WARNING"


def configure_logging(level: str, no_color: bool = False) -> None:
    """Send package log records to stderr through rich at ``level``.

    Calling this again replaces the handler installed by the previous call.
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)
    handler = RichHandler(console=Console(stderr=True, no_color=no_color), show_path=False, markup=False)
    logger.addHandler(handler)
    logger.setLevel(level)


def exit_code_for(error: Exception) -> int:
    """Pick the exit code that describes ``error``."""
    if isinstance(error, (ConfigurationError, click.BadParameter)):
        return ExitCode.INVALID_USAGE
    if isinstance(error, (SchemaNotFoundError, TemplateNotFoundError)):
        return ExitCode.NOT_FOUND
    if isinstance(error, (CatalogUnavailableError, RetrievalError)):
        return ExitCode.DATA_SOURCE_ERROR
    return ExitCode.GENERIC_ERROR


def handle_error(error: Exception, exit_code: Optional[int] = None) -> None:
    """Handle CLI errors with consistent formatting.

    Args:
        error: Exception to handle
        exit_code: Exit code to use; derived from the error type if None
    """
    click.echo(f"Error: {str(error)}", err=True)
    sys.exit(exit_code if exit_code is not None else exit_code_for(error))


def get_registry_context(ctx: click.Context) -> RegistryContext:
    """Return the registry context for this invocation, creating it on first use.

    Raises:
        ConfigurationError: If the environment holds malformed settings
    """
    if ctx.obj.get("registry_context") is None:
        ctx.obj["registry_context"] = RegistryContext(RegistryConfig.from_env())
    context: RegistryContext = ctx.obj["registry_context"]
    return context


def get_env_vars() -> Dict[str, Optional[str]]:
    """Get the environment variables the registry reads.

    Returns:
        Dictionary of variable name to value, None when unset
    """
    return {name: os.environ.get(name) for name in ENVIRONMENT_VARIABLES}


def load_metadata_file(path: str) -> Any:
    """Read a metadata document from a JSON or YAML file.

    Raises:
        click.BadParameter: If the file cannot be read or parsed
    """
    file_path = Path(path)
    try:
        text = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise click.BadParameter(f"Cannot read {path}: {e}")

    try:
        if file_path.suffix.lower() == ".json":
            return json.loads(text)
        return yaml.safe_load(text)
    except (ValueError, yaml.YAMLError) as e:
        raise click.BadParameter(f"Cannot parse {path}: {e}")


def validate_format_support(
    format_type: str,
    supported_formats: List[str],
    command_name: str,
    ctx_obj: Dict[str, Any],
) -> str:
    """Validate format support for a command with consistent fallback behavior.

    Args:
        format_type: The requested format
        supported_formats: List of supported formats for this command
        command_name: Name of the command for error messages
        ctx_obj: Click context object containing verbosity settings

    Returns:
        The validated format (may be changed from input for fallback)

    Raises:
        click.BadParameter: For unsupported formats that can't fall back
    """
    if format_type in supported_formats:
        return format_type

    if format_type == "table":
        fallback_format = "json" if "json" in supported_formats else supported_formats[0]
        # Only show message in verbose mode to avoid cluttering output
        if ctx_obj.get("verbose", 0) > 0:
            click.echo(
                f"Note: {command_name} doesn't support '{format_type}' format, using {fallback_format} instead.",
                err=True,
            )
        return fallback_format

    supported_list = "', '".join(supported_formats)
    raise click.BadParameter(f"Format '{format_type}' is not supported for {command_name}. Use '{supported_list}'.")
