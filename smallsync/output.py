"""Output formatting for the SmallSync CLI."""

import json
from typing import Any, Optional

import click
from rich.console import Console
from rich.table import Table
from rich.text import Text


class OutputFormatter:
    """Prints messages, tables and JSON for CLI commands.

    Informational output is suppressed in quiet and JSON mode. Summary lines
    are kept in quiet mode. Warnings and errors always go to stderr.
    """

    def __init__(self, json_output: bool = False, quiet: bool = False):
        self.json_output = json_output
        self.quiet = quiet

    @property
    def _silent(self) -> bool:
        return self.quiet or self.json_output

    def print(self, message: str = "") -> None:
        if not self._silent:
            click.echo(message)

    def info(self, message: str) -> None:
        if not self._silent:
            click.echo(message)

    def success(self, message: str) -> None:
        if not self._silent:
            click.secho(message, fg="green")

    def summary(self, message: str) -> None:
        """Print a final result line; only JSON mode replaces it."""
        if not self.json_output:
            click.echo(message)

    def warning(self, message: str) -> None:
        click.secho(message, fg="yellow", err=True)

    def error(self, message: str) -> None:
        click.secho(f"Error: {message}", fg="red", err=True)

    def output_json(self, data: Any) -> None:
        click.echo(json.dumps(data, indent=2, default=str))

    def output_table(
        self,
        headers: list[str],
        rows: list[list[Any]],
        title: Optional[str] = None,
    ) -> None:
        """Render rows as a rich table (no markup interpretation)."""
        if self._silent:
            return
        table = Table(title=title)
        for header in headers:
            table.add_column(header)
        for row in rows:
            table.add_row(*(Text(str(cell)) for cell in row))
        Console().print(table)
