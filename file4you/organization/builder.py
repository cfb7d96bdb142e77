"""
Builds the in-memory directory tree from the real filesystem.

Each directory may carry an ignore file (gitignore syntax); matching entries
are left out of the model entirely.
"""

import logging
import os
from pathlib import Path
from typing import Optional, Union

import pathspec

from ..core.errors import ParamsValidationError
from ..core.metadata import degraded_metadata, metadata_from_path, metadata_from_stat
from ..trees import DirectoryNode, DirectoryTree, FileNode

logger = logging.getLogger(__name__)

DEFAULT_IGNORE_FILE = ".file4you-ignore"

# Repository metadata is never part of the model
ALWAYS_IGNORED = frozenset({".git"})


def calculate_max_depth(source_dir: Union[str, Path]) -> int:
    """
    Compute the deepest entry below ``source_dir``.

    Entries directly inside ``source_dir`` are at depth 1; the root itself
    does not count.

    Raises:
        ParamsValidationError: if ``source_dir`` is empty
        OSError: if any directory cannot be read
    """
    if source_dir is None or not str(source_dir).strip():
        raise ParamsValidationError("source directory path cannot be empty")

    root = os.fspath(source_dir)
    max_depth = 0

    def onerror(error: OSError) -> None:
        raise error

    for dirpath, dirnames, filenames in os.walk(root, onerror=onerror):
        rel = os.path.relpath(dirpath, root)
        base = 0 if rel == os.curdir else rel.count(os.sep) + 1
        if dirnames or filenames:
            max_depth = max(max_depth, base + 1)

    return max_depth


def load_ignore_spec(
    directory: Path, ignore_file_name: str = DEFAULT_IGNORE_FILE
) -> Optional[pathspec.PathSpec]:
    """
    Load the ignore rules of one directory.

    Returns:
        Compiled rules, or None if the directory has no ignore file

    Raises:
        OSError: if the ignore file exists but cannot be read
    """
    ignore_path = Path(directory) / ignore_file_name
    if not ignore_path.is_file():
        return None

    with open(ignore_path, "r", encoding="utf-8") as f:
        return pathspec.GitIgnoreSpec.from_lines(f)


class TreeBuilder:
    """Walks a directory and populates a ``DirectoryTree``."""

    def __init__(
        self,
        ignore_file_name: str = DEFAULT_IGNORE_FILE,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the builder.

        Args:
            ignore_file_name: Name of the per-directory ignore file
            logger: Logger to use instead of the module logger
        """
        self.ignore_file_name = ignore_file_name
        self.logger = logger or logging.getLogger(__name__)

    def build(
        self,
        root: Union[str, Path],
        recursive: bool = True,
        max_depth: Optional[int] = None,
    ) -> DirectoryTree:
        """
        Build a tree mirroring the filesystem below ``root``.

        Args:
            root: Directory to model
            recursive: Descend into subdirectories
            max_depth: Directories deeper than this are not listed;
                None computes the real maximum depth first

        Returns:
            Populated tree with metrics already walked

        Raises:
            OSError: if a directory cannot be listed
        """
        root_path = Path(root).expanduser().resolve()
        if max_depth is None:
            max_depth = calculate_max_depth(root_path)

        self.logger.info(
            f"Building directory tree for {root_path} "
            f"(recursive={recursive}, max_depth={max_depth})"
        )

        tree = DirectoryTree(
            DirectoryNode(root_path, metadata=metadata_from_path(root_path)),
            logger=self.logger,
        )
        self._build_nodes(tree.root, recursive, max_depth, 0)
        tree.record_operation("build")
        tree.walk()
        return tree

    def _build_nodes(
        self, node: DirectoryNode, recursive: bool, max_depth: int, depth: int
    ) -> None:
        if depth > max_depth:
            self.logger.warning(
                f"Max depth of {max_depth} reached at {node.path}. "
                f"Skipping deeper levels."
            )
            return

        with os.scandir(node.path) as it:
            entries = sorted(it, key=lambda e: e.name)

        ignored = load_ignore_spec(node.path, self.ignore_file_name)

        for entry in entries:
            if entry.name in ALWAYS_IGNORED:
                continue
            child_path = node.path / entry.name

            try:
                is_dir = entry.is_dir(follow_symlinks=False)
            except OSError:
                is_dir = False

            if ignored is not None:
                rel = entry.name + ("/" if is_dir else "")
                if ignored.match_file(rel):
                    self.logger.info(f"Ignoring {child_path}")
                    continue

            try:
                metadata = metadata_from_stat(entry.stat(), is_dir=is_dir)
            except OSError as e:
                self.logger.warning(f"Error getting file info for {child_path}: {e}")
                metadata = degraded_metadata(is_dir)

            if is_dir:
                child = node.add_child_directory(entry.name, metadata=metadata)
                if recursive:
                    self._build_nodes(child, recursive, max_depth, depth + 1)
            else:
                node.add_file(FileNode(child_path, name=entry.name, metadata=metadata))
