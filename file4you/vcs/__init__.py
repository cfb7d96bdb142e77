"""Version control integration."""

from .git import GitManager, parse_conflicting_files

__all__ = ["GitManager", "parse_conflicting_files"]
