"""
K-d tree over directory metadata points.

Points are (size, modified, created, permissions). All comparisons use the
squared Euclidean distance, so no square root is taken per comparison.
The tree is immutable once built; inserting means building a new one.
"""

import heapq
import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence, Tuple

import numpy as np

from ..core.types import POINT_DIMENSIONS

logger = logging.getLogger(__name__)


@dataclass
class DirectoryPoint:
    """A metadata point tied to the node it was computed from."""

    coordinates: Tuple[float, ...]
    node: Any = field(default=None, compare=False, repr=False)


@dataclass
class _KDNode:
    index: int
    axis: int
    left: Optional["_KDNode"] = None
    right: Optional["_KDNode"] = None


class KDTree:
    """Static k-d tree with nearest-neighbor and radius queries."""

    def __init__(self, points: Sequence[DirectoryPoint], dimensions: int = POINT_DIMENSIONS):
        """
        Build the tree.

        Args:
            points: Points to index
            dimensions: Number of coordinates per point
        """
        self.dimensions = dimensions
        self.points: List[DirectoryPoint] = list(points)

        if self.points:
            self._coords = np.asarray(
                [p.coordinates for p in self.points], dtype=np.float64
            ).reshape(len(self.points), dimensions)
        else:
            self._coords = np.empty((0, dimensions), dtype=np.float64)

        self._root = self._build(np.arange(len(self.points)), 0)

    def __len__(self) -> int:
        return len(self.points)

    def _build(self, indices: np.ndarray, depth: int) -> Optional[_KDNode]:
        if indices.size == 0:
            return None

        axis = depth % self.dimensions
        order = indices[np.argsort(self._coords[indices, axis], kind="stable")]
        median = order.size // 2

        return _KDNode(
            index=int(order[median]),
            axis=axis,
            left=self._build(order[:median], depth + 1),
            right=self._build(order[median + 1 :], depth + 1),
        )

    def _query_vector(self, query: Sequence[float]) -> np.ndarray:
        vector = np.asarray(query, dtype=np.float64)
        if vector.shape != (self.dimensions,):
            raise ValueError(
                f"query must have {self.dimensions} coordinates, got {vector.shape}"
            )
        return vector

    def _distance2(self, index: int, query: np.ndarray) -> float:
        diff = self._coords[index] - query
        return float(np.dot(diff, diff))

    def nearest(
        self, query: Sequence[float], k: int = 1
    ) -> List[Tuple[float, DirectoryPoint]]:
        """
        Find the k points closest to ``query``.

        Returns:
            (squared distance, point) pairs, closest first
        """
        if k <= 0 or self._root is None:
            return []

        target = self._query_vector(query)
        # Max-heap of (-dist2, -index) keeps the k best seen so far
        best: List[Tuple[float, int]] = []

        def visit(node: Optional[_KDNode]) -> None:
            if node is None:
                return

            dist2 = self._distance2(node.index, target)
            entry = (-dist2, -node.index)
            if len(best) < k:
                heapq.heappush(best, entry)
            elif entry > best[0]:
                heapq.heapreplace(best, entry)

            delta = target[node.axis] - self._coords[node.index, node.axis]
            near, far = (node.left, node.right) if delta < 0 else (node.right, node.left)

            visit(near)
            if len(best) < k or delta * delta <= -best[0][0]:
                visit(far)

        visit(self._root)

        results = sorted((-neg_d, -neg_i) for neg_d, neg_i in best)
        return [(dist2, self.points[index]) for dist2, index in results]

    def within_radius(
        self, query: Sequence[float], radius: float
    ) -> List[Tuple[float, DirectoryPoint]]:
        """
        Find all points within ``radius`` of ``query``.

        Returns:
            (squared distance, point) pairs, closest first
        """
        if radius < 0 or self._root is None:
            return []

        target = self._query_vector(query)
        limit = radius * radius
        found: List[Tuple[float, int]] = []

        stack = [self._root]
        while stack:
            node = stack.pop()

            dist2 = self._distance2(node.index, target)
            if dist2 <= limit:
                found.append((dist2, node.index))

            delta = target[node.axis] - self._coords[node.index, node.axis]
            if node.left is not None and (delta < 0 or delta * delta <= limit):
                stack.append(node.left)
            if node.right is not None and (delta >= 0 or delta * delta <= limit):
                stack.append(node.right)

        found.sort()
        return [(dist2, self.points[index]) for dist2, index in found]
