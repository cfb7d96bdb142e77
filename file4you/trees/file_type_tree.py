"""
Category-mapping tree.

Maps file extensions to destination category folders. Built once from
configuration and treated as immutable afterwards.
"""

import logging
import weakref
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Set

logger = logging.getLogger(__name__)

ROOT_NAME = "root"


def normalize_extension_entry(ext: str) -> str:
    """Lowercase an extension and make sure it starts with a dot."""
    ext = ext.strip().lower()
    if ext and not ext.startswith("."):
        ext = f".{ext}"
    return ext


class FileTypeNode:
    """One category folder in the mapping tree."""

    def __init__(
        self,
        name: str,
        extensions: Optional[Iterable[str]] = None,
        parent: Optional["FileTypeNode"] = None,
        is_root: bool = False,
    ):
        self.name = name
        self.extensions: Set[str] = {
            normalize_extension_entry(e) for e in (extensions or []) if e.strip()
        }
        self.children: List["FileTypeNode"] = []
        self._is_root = is_root
        self._parent_ref = weakref.ref(parent) if parent is not None else None

    @property
    def parent(self) -> Optional["FileTypeNode"]:
        if self._parent_ref is None:
            return None
        return self._parent_ref()

    def is_root(self) -> bool:
        return self._is_root

    def allows_extension(self, ext: str) -> bool:
        return ext.lower() in self.extensions

    def find_child(self, name: str) -> Optional["FileTypeNode"]:
        for child in self.children:
            if child.name == name:
                return child
        return None

    def add_child(self, name: str) -> "FileTypeNode":
        """Return the child called ``name``, creating it if needed."""
        child = self.find_child(name)
        if child is None:
            child = FileTypeNode(name, parent=self)
            self.children.append(child)
        return child

    def __repr__(self) -> str:
        return f"FileTypeNode({self.name!r}, extensions={sorted(self.extensions)})"


class FileTypeTree:
    """Tree of category folders keyed by extension."""

    def __init__(self) -> None:
        self.root = FileTypeNode(ROOT_NAME, is_root=True)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Iterable[str]]) -> "FileTypeTree":
        tree = cls()
        tree.populate(mapping)
        return tree

    def populate(self, mapping: Mapping[str, Iterable[str]]) -> None:
        """
        Add categories from a ``category -> extensions`` mapping.

        A category name containing ``/`` creates nested folders, with the
        extensions attached to the innermost one. Mapping order is kept,
        which fixes the search order.
        """
        for category, extensions in mapping.items():
            segments = [s for s in category.replace("\\", "/").split("/") if s]
            if not segments:
                logger.warning(f"Ignoring category with empty name: {category!r}")
                continue

            node = self.root
            for segment in segments:
                node = node.add_child(segment)

            for ext in extensions:
                normalized = normalize_extension_entry(ext)
                if normalized:
                    node.extensions.add(normalized)

    def find_node_for_extension(self, ext: str) -> Optional[FileTypeNode]:
        """
        Depth-first, pre-order search for the first category accepting ``ext``.

        The root is never a match.
        """
        ext = ext.lower()
        stack = list(reversed(self.root.children))
        while stack:
            node = stack.pop()
            if node.allows_extension(ext):
                return node
            stack.extend(reversed(node.children))
        return None

    def find_folder_for_extension(self, ext: str) -> Optional[Path]:
        """
        Resolve the relative destination folder for an extension.

        Returns:
            Relative path of the matching category, or None if unmapped
        """
        node = self.find_node_for_extension(ext)
        if node is None:
            return None
        return self.build_path(node)

    @staticmethod
    def build_path(node: FileTypeNode) -> Path:
        """Join category names from below the root down to ``node``."""
        if not node.name:
            raise ValueError(f"Category node has an empty name: {node!r}")

        segments = [node.name]
        current = node.parent
        while current is not None and not current.is_root():
            segments.append(current.name)
            current = current.parent

        return Path(*reversed(segments))

    def categories(self) -> Dict[str, List[str]]:
        """Flatten back into a ``category path -> sorted extensions`` mapping."""
        result: Dict[str, List[str]] = {}
        stack = list(reversed(self.root.children))
        while stack:
            node = stack.pop()
            result[self.build_path(node).as_posix()] = sorted(node.extensions)
            stack.extend(reversed(node.children))
        return result
