"""
Low-level file operations used by the organize engine.

Moves try a rename first and fall back to copy+delete when source and
destination live on different devices.
"""

import errno
import logging
import os
import shutil
from pathlib import Path
from typing import Collection, Optional

logger = logging.getLogger(__name__)

COPY_CHUNK_SIZE = 1024 * 1024


def generate_unique_filename(path: Path, reserved: Collection[Path] = ()) -> Path:
    """
    Find a free name by appending ``_<n>`` before the extension.

    ``report.txt`` becomes ``report_1.txt``, then ``report_2.txt``...

    Args:
        path: Desired destination path
        reserved: Paths to treat as taken even if they do not exist yet

    Returns:
        First candidate that neither exists nor is reserved
    """
    path = Path(path)
    counter = 1
    while True:
        candidate = path.with_name(f"{path.stem}_{counter}{path.suffix}")
        if candidate not in reserved and not candidate.exists():
            return candidate
        counter += 1


def copy_file(
    src: Path,
    dst: Path,
    remove: bool = False,
    dry_run: bool = False,
    log: Optional[logging.Logger] = None,
) -> None:
    """
    Copy a file by reading and writing its full contents.

    Args:
        src: Source file
        dst: Destination file (replaced if it exists)
        remove: Delete the source after copying
        dry_run: Only log what would happen

    Raises:
        OSError: if reading, writing or removing fails
    """
    log = log or logger
    if dry_run:
        log.info(f"[DRY RUN] Would copy {src} → {dst}")
        return

    with open(src, "rb") as fsrc, open(dst, "wb") as fdst:
        shutil.copyfileobj(fsrc, fdst, COPY_CHUNK_SIZE)
    shutil.copystat(src, dst)

    if remove:
        os.remove(src)


def copy_tree(
    src: Path,
    dst: Path,
    remove: bool = False,
    dry_run: bool = False,
    log: Optional[logging.Logger] = None,
) -> None:
    """
    Recursively copy a directory, optionally removing the original.

    Raises:
        OSError: on any copy failure
    """
    log = log or logger
    src = Path(src)
    dst = Path(dst)

    if dry_run:
        log.info(f"[DRY RUN] Would copy directory {src} → {dst}")
        return

    dst.mkdir(parents=True, exist_ok=True)
    for entry in sorted(src.iterdir()):
        target = dst / entry.name
        if entry.is_dir() and not entry.is_symlink():
            copy_tree(entry, target, remove=False, log=log)
        else:
            copy_file(entry, target, log=log)

    if remove:
        shutil.rmtree(src)


def move_path(
    src: Path,
    dst: Path,
    dry_run: bool = False,
    log: Optional[logging.Logger] = None,
) -> bool:
    """
    Move a file or directory.

    Tries ``os.replace`` first; on a cross-device error copies and then
    deletes the source.

    Returns:
        True if the cross-device fallback was used

    Raises:
        OSError: for any failure other than the handled cross-device case
    """
    log = log or logger
    src = Path(src)
    dst = Path(dst)

    if dry_run:
        log.info(f"[DRY RUN] Would move {src} → {dst}")
        return False

    try:
        os.replace(src, dst)
        return False
    except OSError as e:
        if e.errno != errno.EXDEV:
            raise

    log.info(f"Cross-device move detected, copying {src} → {dst} instead")
    if src.is_dir():
        copy_tree(src, dst, remove=True, log=log)
    else:
        copy_file(src, dst, remove=True, log=log)
    return True
