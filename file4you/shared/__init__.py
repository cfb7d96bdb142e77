"""
Shared utilities for file4you.
"""

from .utils import format_bytes, resolve_log_level, setup_logging

__all__ = [
    "format_bytes",
    "resolve_log_level",
    "setup_logging",
]
