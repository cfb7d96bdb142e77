"""
Helpers shared by the CLI commands.
"""

import sys

import click
from rich.console import Console

from ..desktop_fs import DesktopFS

console = Console()


def get_fs(ctx: click.Context) -> DesktopFS:
    """Return the DesktopFS created by the group callback."""
    return ctx.find_object(DesktopFS)


def fail(message: str) -> None:
    """Print an error in red and exit with status 1."""
    console.print(f"[red]✗ {message}[/red]")
    sys.exit(1)
