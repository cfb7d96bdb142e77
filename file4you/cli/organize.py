"""
CLI commands for organizing files and undoing a run.
"""

from pathlib import Path
from typing import Optional

import click
from rich.table import Table

from ..core.errors import File4YouError
from ..organization import ConflictResolution, OrganizeParams, OrganizeResult
from .common import console, fail, get_fs


def display_result(result: OrganizeResult) -> None:
    """Display organize results as a table."""
    console.print()
    title = "Organization Results" + (" (DRY RUN)" if result.dry_run else "")
    console.print(f"[bold cyan]{title}[/bold cyan]\n")

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Metric", style="cyan")
    table.add_column("Count", justify="right", style="white")

    table.add_row("Total Files", str(result.total_files))
    table.add_row("Organized", f"[green]{result.organized}[/green]")
    table.add_row("Renamed", str(result.renamed))
    table.add_row("Skipped", f"[yellow]{result.skipped}[/yellow]")
    table.add_row("Unmapped", f"[yellow]{result.unmapped}[/yellow]")
    table.add_row("Failed", f"[red]{result.failed}[/red]")

    console.print(table)

    if result.committed:
        console.print("\n[green]✓ Changes committed to git[/green]")

    if result.transaction_id:
        console.print(f"\n[dim]Transaction ID: {result.transaction_id}[/dim]")
        console.print("[dim]Use 'file4you undo <id>' to revert this run[/dim]")


@click.command()
@click.argument("source", type=click.Path(exists=True, file_okay=False))
@click.argument("target", type=click.Path(file_okay=False), required=False)
@click.option(
    "--recursive/--no-recursive",
    default=True,
    help="Descend into subdirectories",
)
@click.option("--copy", "copy_files", is_flag=True, default=False, help="Copy instead of move")
@click.option(
    "--remove-after",
    is_flag=True,
    default=False,
    help="Delete originals after copying (with --copy)",
)
@click.option(
    "--dry-run",
    is_flag=True,
    default=False,
    help="Preview changes without executing",
)
@click.option(
    "--conflict",
    type=click.Choice([c.value for c in ConflictResolution], case_sensitive=False),
    default=ConflictResolution.RENAME.value,
    help="What to do when the destination exists",
)
@click.option("--git/--no-git", "git_enabled", default=False, help="Commit the result")
@click.option(
    "--stash",
    is_flag=True,
    default=False,
    help="Stash uncommitted changes first and restore them after",
)
@click.option("--max-depth", type=click.IntRange(min=0), default=None)
@click.option("--workers", type=click.IntRange(min=1), default=None, help="Worker threads")
@click.pass_context
def organize(
    ctx: click.Context,
    source: str,
    target: Optional[str],
    recursive: bool,
    copy_files: bool,
    remove_after: bool,
    dry_run: bool,
    conflict: str,
    git_enabled: bool,
    stash: bool,
    max_depth: Optional[int],
    workers: Optional[int],
) -> None:
    """
    Organize files from SOURCE into category folders under TARGET.

    TARGET defaults to the configured target_dir, or SOURCE itself.

    \b
    Examples:
        file4you organize ~/Desktop --dry-run
        file4you organize ~/Downloads ~/Sorted --copy --conflict skip
    """
    fs = get_fs(ctx)
    if workers:
        fs.engine.max_workers = workers

    target_dir = Path(target) if target else fs.config.target_dir or Path(source)

    params = OrganizeParams(
        source_dir=Path(source).expanduser().resolve(),
        target_dir=Path(target_dir).expanduser().resolve(),
        recursive=recursive,
        copy_files=copy_files,
        remove_after=remove_after,
        dry_run=dry_run,
        conflict_resolution=conflict.lower(),
        git_enabled=git_enabled,
        stash_changes=stash,
        max_depth=max_depth,
    )

    try:
        result = fs.organize(params)
    except (File4YouError, OSError) as e:
        fail(str(e))

    display_result(result)


@click.command()
@click.argument("transaction_id")
@click.pass_context
def undo(ctx: click.Context, transaction_id: str) -> None:
    """Revert the organize run TRANSACTION_ID."""
    fs = get_fs(ctx)
    console.print(f"[yellow]Rolling back transaction {transaction_id}...[/yellow]")

    try:
        reverted = fs.undo(transaction_id)
    except (File4YouError, OSError) as e:
        fail(f"Rollback failed: {e}")

    console.print(f"[green]✓ Rollback complete ({reverted} operation(s))[/green]")
