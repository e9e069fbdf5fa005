"""Main CLI application for the schemata registry."""

from typing import Optional

import click
import rich_click as rich_click

from .utils import configure_logging, resolve_format, resolve_log_level

# Configure rich-click
rich_click.rich_click.USE_RICH_MARKUP = True
rich_click.rich_click.USE_MARKDOWN = True
rich_click.rich_click.SHOW_ARGUMENTS = True
rich_click.rich_click.GROUP_ARGUMENTS_OPTIONS = True


@click.group(cls=rich_click.RichGroup, invoke_without_command=True)
@click.option(
    "--format",
    type=click.Choice(["table", "json", "yaml"], case_sensitive=False),
    help="Output format. Defaults to 'table' for TTY, 'json' for non-TTY.",
)
@click.option("--verbose", "-v", count=True, help="Increase verbosity (can be used multiple times).")
@click.option("--quiet", "-q", count=True, help="Decrease verbosity (can be used multiple times).")
@click.option("--debug", is_flag=True, help="Enable debug-level logging.")
@click.option("--no-color", is_flag=True, help="Disable color output.")
@click.option("--version", is_flag=True, is_eager=True, help="Print CLI and library version information.")
@click.pass_context
def app(
    ctx: click.Context,
    format: Optional[str] = None,
    verbose: int = 0,
    quiet: int = 0,
    debug: bool = False,
    no_color: bool = False,
    version: bool = False,
) -> None:
    """Schemata registry CLI - resolve, load and validate against versioned schemas.

    Schema and template locations are read from SCHEMA_LOCATION and
    TEMPLATES_LOCATION (a local directory or a GitHub URL).

    Examples:
      # Show where a GitHub URL is fetched from
      schemata location resolve https://github.com/acme/schemas/tree/dev

      # Validate a document against a schema version
      schemata validate metadata.json Order 1.0.0

      # Find every schema a document satisfies
      schemata match metadata.json --only-matching
    """
    if version:
        from .. import __version__

        click.echo(f"schemata CLI version: {__version__}")
        ctx.exit()

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        ctx.exit()

    # Store global options in context for subcommands
    ctx.ensure_object(dict)

    log_level = resolve_log_level(verbose, quiet, debug)
    configure_logging(log_level, no_color)

    ctx.obj.update(
        {
            "format": resolve_format(format),
            "format_explicit": format is not None,
            "verbose": verbose,
            "quiet": quiet,
            "debug": debug,
            "no_color": no_color,
            "log_level": log_level,
            "registry_context": None,
        }
    )


# Import and register subcommands (at module top is preferred, but we place
# here after context is built to avoid circular import issues in runtime.)
from .commands import env, location, schemas, templates, validate  # noqa: E402

app.add_command(location.location)
app.add_command(schemas.schemas)
app.add_command(validate.validate)
app.add_command(validate.match)
app.add_command(templates.templates)
app.add_command(env.env)


if __name__ == "__main__":
    app()
