"""
CLI commands for the git integration.
"""

import click

from ..core.errors import File4YouError
from .common import console, fail, get_fs


@click.command("git-init")
@click.argument("directory", type=click.Path(file_okay=False))
@click.pass_context
def git_init(ctx: click.Context, directory: str) -> None:
    """Initialize a git repository in DIRECTORY."""
    fs = get_fs(ctx)
    try:
        created = fs.git.init_repo(directory)
    except (File4YouError, OSError) as e:
        fail(str(e))

    if created:
        console.print(f"[green]✓ Initialized repository in {directory}[/green]")
    else:
        console.print(f"[yellow]Repository already exists in {directory}[/yellow]")


@click.command()
@click.argument("repo", type=click.Path(exists=True, file_okay=False))
@click.pass_context
def history(ctx: click.Context, repo: str) -> None:
    """List commits of REPO, newest first, with their rewind step."""
    fs = get_fs(ctx)
    try:
        commits = fs.history(repo)
    except File4YouError as e:
        fail(str(e))

    if not commits:
        console.print("[yellow]No commits yet[/yellow]")
        return

    for step, commit_id in enumerate(commits):
        console.print(f"[cyan]{step:>4}[/cyan]  {commit_id}")


@click.command()
@click.argument("repo", type=click.Path(exists=True, file_okay=False))
@click.argument("target")
@click.pass_context
def rewind(ctx: click.Context, repo: str, target: str) -> None:
    """
    Check out an earlier state of REPO.

    TARGET is a full commit id or a number of steps back (0 = latest).
    """
    fs = get_fs(ctx)
    try:
        commit_id = fs.rewind(repo, target)
    except File4YouError as e:
        fail(str(e))

    console.print(f"[green]✓ Rewound to {commit_id}[/green]")
