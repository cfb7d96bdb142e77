"""
Main CLI entry point for file4you.
"""

from typing import Optional

import click
from rich.console import Console

from .. import __version__
from ..config import load_config
from ..desktop_fs import DesktopFS
from ..shared.utils import setup_logging
from ..version import get_version_string
from .common import console, fail
from .organize import organize, undo
from .scan import scan, similar
from .vcs import git_init, history, rewind


@click.group()
@click.version_option(version=__version__, prog_name="file4you")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Verbose output")
@click.option("-q", "--quiet", is_flag=True, default=False, help="Only show warnings")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to a config.toml",
)
@click.pass_context
def cli(
    ctx: click.Context, verbose: bool, quiet: bool, config_path: Optional[str]
) -> None:
    """
    file4you - organize files into category folders.

    \b
    Examples:
        # Preview what would move where
        file4you organize ~/Desktop --dry-run

        # Organize and commit the result to git
        file4you organize ~/Desktop ~/Sorted --git

        # Undo a run
        file4you undo <transaction-id>
    """
    try:
        config = load_config(config_path)
    except (OSError, ValueError) as e:
        fail(f"Could not load config: {e}")

    setup_logging(
        verbose=verbose,
        quiet=quiet,
        default_level=config.log_level,
        console=Console(stderr=True),
    )
    ctx.obj = DesktopFS(config)


@cli.command()
def version() -> None:
    """Show version information."""
    console.print(f"[bold cyan]file4you[/bold cyan] {get_version_string()}")


cli.add_command(organize)
cli.add_command(undo)
cli.add_command(scan)
cli.add_command(similar)
cli.add_command(git_init)
cli.add_command(history)
cli.add_command(rewind)


if __name__ == "__main__":
    cli()
