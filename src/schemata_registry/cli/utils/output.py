"""Dispatch command output to the selected formatter."""

from typing import Any, Callable, Optional

import click
from rich.console import Console

from ..formatters import create_console, format_json, format_yaml


def emit(ctx: click.Context, payload: Any, render_table: Optional[Callable[[Console], None]] = None) -> None:
    """Write ``payload`` in the format chosen for this invocation.

    Args:
        ctx: Click context holding the resolved format
        payload: JSON-compatible data for the json and yaml formats
        render_table: Draws the table view; commands without one fall back to json
    """
    format_type = ctx.obj["format"]
    if format_type == "yaml":
        format_yaml(payload)
    elif format_type == "json" or render_table is None:
        format_json(payload)
    else:
        render_table(create_console(no_color=ctx.obj["no_color"]))
