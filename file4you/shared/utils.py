"""
Shared utilities for file4you.

Formatting helpers and logging setup used by the CLI and library code.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

LOG_LEVELS = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}


def format_bytes(size_bytes: int) -> str:
    """
    Format bytes in human-readable format.

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted string (e.g., "2.50 GB")
    """
    if size_bytes == 0:
        return "0 B"

    units = ["B", "KB", "MB", "GB", "TB", "PB"]
    unit_index = 0
    size = float(size_bytes)

    while size >= 1024.0 and unit_index < len(units) - 1:
        size /= 1024.0
        unit_index += 1

    return f"{size:.2f} {units[unit_index]}"


def resolve_log_level(
    verbose: bool = False, quiet: bool = False, default: str = "INFO"
) -> int:
    """Pick a logging level from CLI flags, falling back to a configured name."""
    if quiet:
        return logging.WARNING
    if verbose:
        return logging.DEBUG
    return LOG_LEVELS.get(default.upper(), logging.INFO)


def setup_logging(
    verbose: bool = False,
    quiet: bool = False,
    default_level: str = "INFO",
    console: Optional[Console] = None,
) -> None:
    """
    Configure logging for the application.

    Args:
        verbose: If True, set logging level to DEBUG
        quiet: If True, set logging level to WARNING
        default_level: Level name used when neither flag is set
        console: Console the rich handler writes to
    """
    level = resolve_log_level(verbose, quiet, default_level)

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[RichHandler(rich_tracebacks=True, console=console or Console(stderr=True))],
        force=True,
    )
