"""Core types, metadata and errors."""

from .errors import (
    File4YouError,
    GitCommandError,
    GitConflictError,
    MetadataValidationError,
    OperationCancelledError,
    OrganizeError,
    OrganizeTimeoutError,
    ParamsValidationError,
    RewindTargetError,
    TransactionNotFoundError,
)
from .metadata import (
    add_tags_to_metadata,
    generate_tags,
    metadata_from_path,
    metadata_from_stat,
)
from .types import Metadata, NodeType, TreeMetrics

__all__ = [
    "File4YouError",
    "GitCommandError",
    "GitConflictError",
    "MetadataValidationError",
    "OperationCancelledError",
    "OrganizeError",
    "OrganizeTimeoutError",
    "ParamsValidationError",
    "RewindTargetError",
    "TransactionNotFoundError",
    "add_tags_to_metadata",
    "generate_tags",
    "metadata_from_path",
    "metadata_from_stat",
    "Metadata",
    "NodeType",
    "TreeMetrics",
]
