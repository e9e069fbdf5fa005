"""Rich table formatter for CLI output."""

import sys
from typing import Any, Dict, List, Optional, TextIO

from rich.console import Console
from rich.table import Table
from rich.text import Text

from ...loading import LoadResult
from ...location import Location
from ...templates import TemplateDescriptor
from ...validation import MatchResult


def create_console(output: Optional[TextIO] = None, no_color: bool = False) -> Console:
    """Create a Rich console instance.

    Args:
        output: Output stream (defaults to stdout)
        no_color: Disable color output

    Returns:
        Console instance
    """
    if output is None:
        output = sys.stdout

    return Console(file=output, no_color=no_color)


def _status(ok: bool) -> Text:
    return Text("✓", style="green") if ok else Text("✗", style="red")


def format_location_table(value: str, location: Location, console: Optional[Console] = None) -> None:
    """Format a resolved location as a Rich table."""
    if console is None:
        console = create_console()

    table = Table(title="Resolved Location", show_header=True, header_style="bold magenta")
    table.add_column("Field", style="cyan")
    table.add_column("Value")

    table.add_row("Value", value)
    table.add_row("Base path", location.base_path)
    table.add_row("Mode", "local file" if location.load_from_local_file else "remote")

    console.print(table)


def format_catalog_table(catalog: Dict[str, List[str]], console: Optional[Console] = None) -> None:
    """Format the schema catalog as a Rich table.

    Args:
        catalog: Schema name to versions, in catalog order
        console: Rich console (will create if None)
    """
    if console is None:
        console = create_console()

    table = Table(title="Available Schemas", show_header=True, header_style="bold magenta")
    table.add_column("Schema", style="cyan", no_wrap=True)
    table.add_column("Versions")

    for name, versions in catalog.items():
        table.add_row(name, ", ".join(versions))

    console.print(table)


def format_load_results_table(results: List[LoadResult], title: str, console: Optional[Console] = None) -> None:
    """Format bulk load results as a Rich table."""
    if console is None:
        console = create_console()

    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("Entry", style="cyan")
    table.add_column("Loaded", justify="center")
    table.add_column("Error", style="dim")

    for result in results:
        table.add_row(result.key, _status(result.success), result.error or "")

    console.print(table)

    failed = sum(1 for result in results if not result.success)
    if failed:
        console.print(f"[yellow]{failed} of {len(results)} entries failed to load[/yellow]")
    else:
        console.print(f"[green]Loaded {len(results)} entries[/green]")


def format_errors_table(errors: List[Dict[str, Any]], title: str, console: Optional[Console] = None) -> None:
    """Format validation errors as a Rich table, or a success line when there are none."""
    if console is None:
        console = create_console()

    if not errors:
        console.print(f"✅ [green]{title}: valid[/green]")
        return

    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("Location", style="cyan")
    table.add_column("Keyword", style="yellow")
    table.add_column("Message")

    for error in errors:
        table.add_row(error.get("instance_path") or "/", error.get("keyword") or "", error.get("message", ""))

    console.print(table)


def format_matches_table(matches: List[MatchResult], console: Optional[Console] = None) -> None:
    """Format schema matching results as a Rich table."""
    if console is None:
        console = create_console()

    table = Table(title="Schema Matches", show_header=True, header_style="bold magenta")
    table.add_column("Schema", style="cyan", no_wrap=True)
    table.add_column("Version", no_wrap=True)
    table.add_column("Matches", justify="center")
    table.add_column("First error", style="dim")

    for match in matches:
        first_error = match.errors[0].get("message", "") if match.errors else ""
        table.add_row(match.name, match.version, _status(match.matches), first_error)

    console.print(table)


def format_templates_table(templates: List[TemplateDescriptor], console: Optional[Console] = None) -> None:
    """Format the template catalog as a Rich table."""
    if console is None:
        console = create_console()

    table = Table(title="Available Templates", show_header=True, header_style="bold magenta")
    table.add_column("Input model", style="cyan")
    table.add_column("Input version")
    table.add_column("Output model", style="cyan")
    table.add_column("Output version")

    for template in templates:
        table.add_row(template.input_model, template.input_version, template.output_model, template.output_version)

    console.print(table)


def format_env_vars_table(env_vars: Dict[str, Optional[str]], console: Optional[Console] = None) -> None:
    """Format environment variables as a Rich table.

    Args:
        env_vars: Environment variables
        console: Rich console (will create if None)
    """
    if console is None:
        console = create_console()

    table = Table(title="Registry Environment Variables", show_header=True, header_style="bold magenta")

    table.add_column("Variable", style="cyan")
    table.add_column("Value", style="yellow")
    table.add_column("Set", justify="center")

    for key, value in env_vars.items():
        is_set = value is not None
        display_value = value if is_set else "[dim]<not set>[/dim]"
        table.add_row(key, display_value, _status(is_set))

    console.print(table)
