"""
In-memory directory tree with metrics, snapshot export and a spatial index.
"""

import logging
import threading
import time
from datetime import datetime
from pathlib import Path, PurePath
from typing import Iterator, List, Optional, Sequence, Union

from rich.tree import Tree as RichTree

from ..core.errors import MetadataValidationError, OperationCancelledError
from ..core.types import Metadata, NodeType, TreeMetrics
from ..shared.utils import format_bytes
from .kdtree import DirectoryPoint, KDTree
from .nodes import DirectoryNode, FileNode
from .snapshot import DirectorySnapshot, FileSnapshot, TreeSnapshot

logger = logging.getLogger(__name__)

QueryPoint = Union[Sequence[float], Metadata]


def _as_coordinates(query: QueryPoint) -> Sequence[float]:
    if isinstance(query, Metadata):
        return query.to_point()
    return query


class DirectoryTree:
    """A rooted tree of ``DirectoryNode``s mirroring part of a filesystem."""

    def __init__(
        self,
        root: Union[str, Path, DirectoryNode] = "/",
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the tree.

        Args:
            root: Root path, or an existing root node
            logger: Logger to use instead of the module logger
        """
        if isinstance(root, DirectoryNode):
            self.root: Optional[DirectoryNode] = root
        else:
            self.root = DirectoryNode(Path(root))

        self.logger = logger or logging.getLogger(__name__)
        self.kd_tree: Optional[KDTree] = None
        self.kd_tree_data: List[DirectoryPoint] = []
        self._metrics = TreeMetrics()
        self._lock = threading.Lock()
        self._closed = False

    # ------------------------------------------------------------------
    # Walk / metrics
    # ------------------------------------------------------------------

    def walk(self, cancel_event: Optional[threading.Event] = None) -> TreeMetrics:
        """
        Recompute tree metrics.

        Counts every directory and file below the root; the root's direct
        entries are at depth 1.

        Args:
            cancel_event: Stops the walk when set

        Returns:
            Copy of the updated metrics

        Raises:
            OperationCancelledError: if ``cancel_event`` is set during the walk
        """
        if self.root is None:
            raise ValueError("Directory tree has been cleaned up")

        start = time.perf_counter()
        self.logger.info(f"Starting tree walk at {self.root.path}")

        total_nodes = 0
        total_size = 0
        max_depth = 0

        stack = [(self.root, 0)]
        while stack:
            if cancel_event is not None and cancel_event.is_set():
                raise OperationCancelledError(f"Walk of {self.root.path} cancelled")

            node, depth = stack.pop()

            if node.files:
                total_nodes += len(node.files)
                max_depth = max(max_depth, depth + 1)
                total_size += sum(max(f.metadata.size, 0) for f in node.files)

            for child in node.children:
                total_nodes += 1
                max_depth = max(max_depth, depth + 1)
                stack.append((child, depth + 1))

        with self._lock:
            self._metrics.total_nodes = total_nodes
            self._metrics.total_size = total_size
            self._metrics.max_depth = max_depth
            self._metrics.processing_time = time.perf_counter() - start
            self._metrics.last_updated = datetime.now()
            self._metrics.record_operation("walk")

        return self.get_metrics()

    def get_metrics(self) -> TreeMetrics:
        """Return a copy of the current metrics."""
        with self._lock:
            return self._metrics.model_copy(deep=True)

    def record_operation(self, name: str, count: int = 1) -> None:
        with self._lock:
            self._metrics.record_operation(name, count)

    # ------------------------------------------------------------------
    # Structure
    # ------------------------------------------------------------------

    def find_or_create_path(self, segments: Sequence[str]) -> DirectoryNode:
        """
        Walk down from the root, creating missing directories.

        Calling this twice with the same segments returns the same node.
        """
        if self.root is None:
            raise ValueError("Directory tree has been cleaned up")

        current = self.root
        for segment in segments:
            if not segment or segment == ".":
                continue
            current = current.add_child_directory(segment)
        return current

    def add_directory(self, relative_path: Union[str, PurePath]) -> DirectoryNode:
        """Add a directory given as a path relative to the root."""
        return self.find_or_create_path(PurePath(relative_path).parts)

    def add_file(
        self,
        relative_dir: Union[str, PurePath],
        file_name: str,
        size: int = 0,
        modified_at: Optional[datetime] = None,
    ) -> FileNode:
        """
        Add a file below ``relative_dir``, creating intermediate directories.

        Returns:
            The new file node
        """
        directory = self.add_directory(relative_dir)
        metadata = Metadata(size=size, modified_at=modified_at, node_type=NodeType.FILE)
        return directory.add_file(FileNode(directory.path / file_name, metadata=metadata))

    def iter_directories(self) -> Iterator[DirectoryNode]:
        if self.root is None:
            return iter(())
        return self.root.iter_directories()

    def iter_files(self) -> Iterator[FileNode]:
        if self.root is None:
            return iter(())
        return self.root.iter_files()

    def file_count(self) -> int:
        return sum(1 for _ in self.iter_files())

    def flatten(self) -> List[Path]:
        """All directory and file paths, each directory before its contents."""
        paths: List[Path] = []

        def visit(node: DirectoryNode) -> None:
            paths.append(node.path)
            for child in node.children:
                visit(child)
            paths.extend(f.path for f in node.files)

        if self.root is not None:
            visit(self.root)
        return paths

    def flatten_metadata(self) -> dict:
        """Map every node path (as string) to its metadata."""
        result = {}
        for directory in self.iter_directories():
            result[str(directory.path)] = directory.metadata
            for file_node in directory.files:
                result[str(file_node.path)] = file_node.metadata
        return result

    def cleanup(self) -> None:
        """Tear down the tree: clear nodes and drop index structures."""
        if self.root is not None:
            self.root.clear()

        if not self._closed:
            self._closed = True
            self.logger.info("Cleaned up directory tree")

        self.root = None
        self.kd_tree = None
        self.kd_tree_data = []

    # ------------------------------------------------------------------
    # Spatial index
    # ------------------------------------------------------------------

    def build_kd_tree(self) -> KDTree:
        """
        Build the spatial index from every directory with valid metadata.

        Files are not indexed. Directories whose metadata fails validation
        are skipped; their children are still considered.
        """
        points: List[DirectoryPoint] = []
        for directory in self.iter_directories():
            if directory.metadata.node_type != NodeType.DIRECTORY:
                continue
            try:
                coordinates = directory.metadata.to_point()
            except MetadataValidationError as e:
                self.logger.debug(f"Not indexing {directory.path}: {e}")
                continue
            points.append(DirectoryPoint(coordinates=coordinates, node=directory))

        self.kd_tree_data = points
        self.kd_tree = KDTree(points)
        self.record_operation("build_kd_tree")
        self.logger.debug(f"Built spatial index with {len(points)} directories")
        return self.kd_tree

    def insert_node_to_kd_tree(self, node: DirectoryNode) -> bool:
        """
        Add one directory to the index, rebuilding it from scratch.

        Returns:
            False if the node's metadata is invalid and it was not added
        """
        try:
            coordinates = node.metadata.to_point()
        except MetadataValidationError as e:
            self.logger.error(f"Error converting metadata to index point: {e}")
            return False

        self.kd_tree_data.append(DirectoryPoint(coordinates=coordinates, node=node))
        self.kd_tree = KDTree(self.kd_tree_data)
        return True

    def _require_index(self) -> KDTree:
        if self.kd_tree is None:
            return self.build_kd_tree()
        return self.kd_tree

    def range_search(self, query: QueryPoint, radius: float) -> List[DirectoryNode]:
        """Directories within ``radius`` of ``query``, closest first."""
        index = self._require_index()
        return [p.node for _, p in index.within_radius(_as_coordinates(query), radius)]

    def nearest_neighbors(self, query: QueryPoint, k: int) -> List[DirectoryNode]:
        """The ``k`` directories closest to ``query``, closest first."""
        index = self._require_index()
        return [p.node for _, p in index.nearest(_as_coordinates(query), k)]

    # ------------------------------------------------------------------
    # Snapshot export / import
    # ------------------------------------------------------------------

    def to_snapshot(self, include_metrics: bool = True) -> TreeSnapshot:
        if self.root is None:
            raise ValueError("Directory tree has been cleaned up")

        def convert(node: DirectoryNode) -> DirectorySnapshot:
            return DirectorySnapshot(
                path=node.path,
                metadata=node.metadata.model_copy(deep=True),
                children=[convert(child) for child in node.children],
                files=[
                    FileSnapshot(
                        path=f.path,
                        name=f.name,
                        extension=f.extension,
                        metadata=f.metadata.model_copy(deep=True),
                    )
                    for f in node.files
                ],
            )

        return TreeSnapshot(
            root=convert(self.root),
            metrics=self.get_metrics() if include_metrics else None,
        )

    def to_json(self, indent: Optional[int] = 2) -> str:
        return self.to_snapshot().model_dump_json(indent=indent)

    @classmethod
    def from_snapshot(
        cls, snapshot: TreeSnapshot, logger: Optional[logging.Logger] = None
    ) -> "DirectoryTree":
        def convert(
            data: DirectorySnapshot, parent: Optional[DirectoryNode]
        ) -> DirectoryNode:
            node = DirectoryNode(data.path, parent=parent, metadata=data.metadata)
            for file_data in data.files:
                node.add_file(
                    FileNode(
                        file_data.path,
                        name=file_data.name,
                        extension=file_data.extension,
                        metadata=file_data.metadata,
                    )
                )
            node.children = [convert(child, node) for child in data.children]
            return node

        tree = cls(convert(snapshot.root, None), logger=logger)
        if snapshot.metrics is not None:
            tree._metrics = snapshot.metrics.model_copy(deep=True)
        return tree

    @classmethod
    def from_json(
        cls, data: Union[str, bytes], logger: Optional[logging.Logger] = None
    ) -> "DirectoryTree":
        return cls.from_snapshot(TreeSnapshot.model_validate_json(data), logger=logger)

    # ------------------------------------------------------------------
    # Display
    # ------------------------------------------------------------------

    def render(self) -> RichTree:
        """Build a rich tree for terminal display."""
        if self.root is None:
            return RichTree("[dim](empty)[/dim]")

        def label(node: DirectoryNode) -> str:
            return f"[bold blue]{node.name}/[/bold blue]"

        def add(branch: RichTree, node: DirectoryNode) -> None:
            for child in node.children:
                add(branch.add(label(child)), child)
            for f in node.files:
                branch.add(f"{f.name} [dim]({format_bytes(f.metadata.size)})[/dim]")

        tree = RichTree(label(self.root))
        add(tree, self.root)
        return tree

    def __str__(self) -> str:
        return "\n".join(str(p) for p in self.flatten())


def nearest_neighbors(
    tree: DirectoryTree, query: QueryPoint, k: int
) -> List[DirectoryNode]:
    """Build the tree's index if needed and return the ``k`` nearest directories."""
    return tree.nearest_neighbors(query, k)


def range_query(
    tree: DirectoryTree, query: QueryPoint, radius: float
) -> List[DirectoryNode]:
    """Build the tree's index if needed and return directories within ``radius``."""
    return tree.range_search(query, radius)
