"""Location commands for the schemata CLI."""

from typing import Optional

import click

from ...errors import ConfigurationError
from ...location import resolve_resource_location
from ..formatters import format_location_json, format_location_table
from ..utils import ExitCode, emit, handle_error


@click.group()
def location() -> None:
    """Inspect how location strings resolve."""
    pass


@location.command()
@click.argument("value")
@click.option("--branch", help="Branch used when a GitHub URL does not name one.")
@click.pass_context
def resolve(ctx: click.Context, value: str, branch: Optional[str] = None) -> None:
    """Resolve VALUE to a fetch base path and load mode.

    VALUE may be a local directory, a github.com repository URL or a
    raw.githubusercontent.com URL.
    """
    try:
        resolved = resolve_resource_location(value, "VALUE", branch)
    except ConfigurationError as e:
        handle_error(e, ExitCode.INVALID_USAGE)
        return

    emit(
        ctx,
        format_location_json(value, resolved),
        lambda console: format_location_table(value, resolved, console),
    )
