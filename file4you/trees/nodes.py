"""
Directory and file nodes of the in-memory tree model.

Parents own their children and files; the ``parent`` back-reference is a
weak reference used only to reconstruct paths.
"""

import weakref
from pathlib import Path
from typing import Iterator, List, Optional

from ..core.types import Metadata, NodeType


def normalize_extension(name: str) -> str:
    """Return the lowercase extension of ``name`` including the dot."""
    return Path(name).suffix.lower()


class FileNode:
    """A file in the directory tree."""

    __slots__ = ("path", "name", "extension", "metadata")

    def __init__(
        self,
        path: Path,
        name: Optional[str] = None,
        extension: Optional[str] = None,
        metadata: Optional[Metadata] = None,
    ):
        self.path = Path(path)
        self.name = name if name is not None else self.path.name
        self.extension = (
            extension.lower() if extension is not None else normalize_extension(self.name)
        )
        self.metadata = metadata or Metadata(node_type=NodeType.FILE)

    def __repr__(self) -> str:
        return f"FileNode({str(self.path)!r})"


class DirectoryNode:
    """A directory in the directory tree."""

    def __init__(
        self,
        path: Path,
        parent: Optional["DirectoryNode"] = None,
        metadata: Optional[Metadata] = None,
    ):
        self.path = Path(path)
        self.name = self.path.name or str(self.path)
        self.children: List["DirectoryNode"] = []
        self.files: List[FileNode] = []
        self.metadata = metadata or Metadata(node_type=NodeType.DIRECTORY)
        self._parent_ref: Optional["weakref.ReferenceType[DirectoryNode]"] = (
            weakref.ref(parent) if parent is not None else None
        )

    @property
    def parent(self) -> Optional["DirectoryNode"]:
        """Parent directory, or None for the root (or a detached node)."""
        if self._parent_ref is None:
            return None
        return self._parent_ref()

    def is_root(self) -> bool:
        return self._parent_ref is None

    def find_child(self, name: str) -> Optional["DirectoryNode"]:
        """Find a direct child directory by name."""
        for child in self.children:
            if child.name == name:
                return child
        return None

    def add_child_directory(
        self, name: str, metadata: Optional[Metadata] = None
    ) -> "DirectoryNode":
        """
        Add a child directory, or return the existing one with that name.

        Args:
            name: Single path segment
            metadata: Metadata for a newly created child

        Returns:
            The child node
        """
        existing = self.find_child(name)
        if existing is not None:
            return existing

        child = DirectoryNode(self.path / name, parent=self, metadata=metadata)
        self.children.append(child)
        return child

    def add_file(self, file_node: FileNode) -> FileNode:
        """Attach a file node to this directory."""
        self.files.append(file_node)
        return file_node

    def iter_directories(self) -> Iterator["DirectoryNode"]:
        """Yield this directory and all descendants, pre-order."""
        yield self
        for child in self.children:
            yield from child.iter_directories()

    def iter_files(self) -> Iterator[FileNode]:
        """Yield every file in this subtree."""
        for directory in self.iter_directories():
            yield from directory.files

    def depth(self) -> int:
        """Number of ancestors between this node and the root."""
        depth = 0
        current = self.parent
        while current is not None:
            depth += 1
            current = current.parent
        return depth

    def clear(self) -> None:
        """Drop all children and files of this subtree."""
        for child in self.children:
            child.clear()
        self.children = []
        self.files = []

    def __repr__(self) -> str:
        return (
            f"DirectoryNode({str(self.path)!r}, children={len(self.children)}, "
            f"files={len(self.files)})"
        )
