"""YAML output formatter for CLI."""

from typing import Any, Optional, TextIO

import click
import yaml


def format_yaml(data: Any, output: Optional[TextIO] = None) -> None:
    """Format data as YAML and write to output (defaults to stdout).

    Key order is kept so catalog listings read in catalog order.
    """
    yaml_output = yaml.safe_dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True)
    if output is not None:
        output.write(yaml_output)
    else:
        click.echo(yaml_output.rstrip())
