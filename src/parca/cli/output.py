"""Output utilities for CLI commands with clear intent.

user_output is for humans (stderr); machine_output is for data a caller
may pipe (stdout).
"""

from typing import Any

import click
from rich.console import Console
from rich.table import Table


def user_output(message: str = "", nl: bool = True) -> None:
    click.echo(message, err=True, nl=nl)


def machine_output(message: str = "", nl: bool = True) -> None:
    click.echo(message, nl=nl)


def print_table(table: Table) -> None:
    """Render a rich table to stderr alongside other user output."""
    console = Console(stderr=True, width=200)
    console.print(table)


def format_commit(commit: Any) -> str:
    """Short form of a commit id for display."""
    if not commit:
        return "-"
    return str(commit)[:12]
