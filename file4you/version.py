"""Version information for file4you."""

import subprocess
from pathlib import Path
from typing import Optional

__version__ = "0.3.0"

SOURCE_ROOT = Path(__file__).resolve().parent.parent


def get_git_hash() -> Optional[str]:
    """Short commit id of the source checkout file4you runs from.

    Returns:
        The abbreviated id, or None outside a git checkout.
    """
    try:
        result = subprocess.run(
            ["git", "-C", str(SOURCE_ROOT), "rev-parse", "--short=7", "HEAD"],
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            text=True,
            check=True,
            timeout=2,
        )
    except (
        subprocess.CalledProcessError,
        subprocess.TimeoutExpired,
        FileNotFoundError,
    ):
        return None
    return result.stdout.strip() or None


def get_version_string() -> str:
    """Version with the source commit appended when running from a checkout."""
    git_hash = get_git_hash()
    if git_hash:
        return f"{__version__} (git:{git_hash})"
    return __version__
