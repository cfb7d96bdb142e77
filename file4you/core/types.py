"""
Type definitions for the directory and metadata model.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from .errors import MetadataValidationError

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# Tag vocabulary
TAG_SIZE_SMALL = "small"
TAG_SIZE_MEDIUM = "medium"
TAG_SIZE_LARGE = "large"

SIZE_THRESHOLD_SMALL = 1_000
SIZE_THRESHOLD_MEDIUM = 1_000_000

TAG_TYPE_FILE = "file"
TAG_TYPE_DIRECTORY = "folder"

TAG_PERM_READABLE = "readable"
TAG_PERM_WRITABLE = "writable"

UNKNOWN_OWNER = "unknown"

# Dimensions of a metadata point: size, mtime, ctime, permission bits
POINT_DIMENSIONS = 4

MetadataPoint = Tuple[float, float, float, float]


class NodeType(str, Enum):
    """Kind of filesystem node."""

    FILE = "file"
    DIRECTORY = "directory"
    UNKNOWN = "unknown"


def _unix_seconds(value: Optional[datetime]) -> float:
    if value is None:
        return 0.0
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return float(int(value.timestamp()))


class Metadata(BaseModel):
    """Attributes captured for a file or directory."""

    size: int = 0
    modified_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    node_type: NodeType = NodeType.UNKNOWN
    permissions: int = 0
    owner: str = UNKNOWN_OWNER
    tags: List[str] = Field(default_factory=list)

    def validate_metadata(self) -> None:
        """
        Check the metadata invariants.

        Raises:
            MetadataValidationError: if size is negative, modification time
                is unset, or the node kind is neither file nor directory
        """
        if self.size < 0:
            raise MetadataValidationError("size cannot be negative")
        if self.modified_at is None or _unix_seconds(self.modified_at) == 0:
            raise MetadataValidationError("modified time cannot be zero")
        if self.node_type not in (NodeType.FILE, NodeType.DIRECTORY):
            raise MetadataValidationError(f"invalid node type: {self.node_type}")

    def is_valid(self) -> bool:
        """Return True if ``validate_metadata`` would pass."""
        try:
            self.validate_metadata()
        except MetadataValidationError:
            return False
        return True

    def to_point(self) -> MetadataPoint:
        """
        Convert to a 4-dimensional point for the spatial index.

        Returns:
            (size, modified unix seconds, created unix seconds, permission bits)

        Raises:
            MetadataValidationError: if the metadata is invalid
        """
        self.validate_metadata()
        return (
            float(self.size),
            _unix_seconds(self.modified_at),
            _unix_seconds(self.created_at),
            float(self.permissions & 0o777),
        )


class TreeMetrics(BaseModel):
    """Aggregate statistics about a directory tree."""

    model_config = ConfigDict(validate_assignment=False)

    total_nodes: int = 0
    total_size: int = 0
    max_depth: int = 0
    last_updated: datetime = Field(default_factory=datetime.now)
    processing_time: float = 0.0
    operation_counts: Dict[str, int] = Field(default_factory=dict)

    def record_operation(self, name: str, count: int = 1) -> None:
        """Increment the counter for an operation."""
        self.operation_counts[name] = self.operation_counts.get(name, 0) + count
