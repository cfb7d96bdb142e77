"""
file4you - organize files into category folders with git-backed undo.
"""

from .version import __version__

__all__ = ["__version__"]
