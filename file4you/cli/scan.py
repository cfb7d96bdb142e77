"""
CLI commands for scanning a directory and finding similar directories.
"""

from pathlib import Path
from typing import Optional

import click
from rich.table import Table

from ..core.errors import File4YouError
from ..shared.utils import format_bytes
from .common import console, fail, get_fs


@click.command()
@click.argument(
    "directory", type=click.Path(exists=True, file_okay=False), default="."
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["json", "tree"], case_sensitive=False),
    default="tree",
    help="Output format",
)
@click.option(
    "-o", "--output", type=click.Path(dir_okay=False), default=None, help="Write to file"
)
@click.option("--no-recursive", is_flag=True, default=False, help="Only the top level")
@click.pass_context
def scan(
    ctx: click.Context,
    directory: str,
    output_format: str,
    output: Optional[str],
    no_recursive: bool,
) -> None:
    """Index DIRECTORY and print or export its tree."""
    fs = get_fs(ctx)

    try:
        tree = fs.scan(directory, recursive=not no_recursive)
    except (File4YouError, OSError) as e:
        fail(str(e))

    try:
        if output_format.lower() == "json":
            data = tree.to_json()
            if output:
                Path(output).write_text(data, encoding="utf-8")
                console.print(f"[green]✓ Wrote {output}[/green]")
            else:
                click.echo(data)
        else:
            console.print(tree.render())
            metrics = tree.get_metrics()
            console.print(
                f"\n[dim]{metrics.total_nodes} entries, "
                f"{format_bytes(metrics.total_size)}, "
                f"max depth {metrics.max_depth}[/dim]"
            )
    finally:
        tree.cleanup()


@click.command()
@click.argument("root", type=click.Path(exists=True, file_okay=False))
@click.argument("reference", type=click.Path(exists=True))
@click.option("-k", "k", type=click.IntRange(min=1), default=None, help="Nearest N")
@click.option("--radius", type=click.FloatRange(min=0), default=None, help="Search radius")
@click.pass_context
def similar(
    ctx: click.Context,
    root: str,
    reference: str,
    k: Optional[int],
    radius: Optional[float],
) -> None:
    """Find directories under ROOT with metadata similar to REFERENCE."""
    fs = get_fs(ctx)

    try:
        nodes = fs.similar_directories(root, reference, k=k, radius=radius)
    except (File4YouError, OSError) as e:
        fail(str(e))

    if not nodes:
        console.print("[yellow]No similar directories found[/yellow]")
        return

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Directory", style="cyan")
    table.add_column("Size", justify="right")
    table.add_column("Modified")

    for node in nodes:
        modified = node.metadata.modified_at
        table.add_row(
            str(node.path),
            format_bytes(node.metadata.size),
            modified.strftime("%Y-%m-%d %H:%M") if modified else "-",
        )

    console.print(table)
