"""
Tree models: the directory tree, the category-mapping tree and the
spatial index over directory metadata.
"""

from .directory_tree import DirectoryTree, nearest_neighbors, range_query
from .file_type_tree import FileTypeNode, FileTypeTree
from .kdtree import DirectoryPoint, KDTree
from .nodes import DirectoryNode, FileNode
from .snapshot import DirectorySnapshot, FileSnapshot, TreeSnapshot

__all__ = [
    "DirectoryTree",
    "nearest_neighbors",
    "range_query",
    "FileTypeNode",
    "FileTypeTree",
    "DirectoryPoint",
    "KDTree",
    "DirectoryNode",
    "FileNode",
    "DirectorySnapshot",
    "FileSnapshot",
    "TreeSnapshot",
]
