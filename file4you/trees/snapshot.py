"""
Serializable snapshot of a directory tree.

This is the scan/export format: nested directories and files with their
metadata, emitted as JSON and parsed back without loss.
"""

from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field

from ..core.types import Metadata, TreeMetrics

SNAPSHOT_FORMAT_VERSION = 1


class FileSnapshot(BaseModel):
    """A file entry."""

    path: Path
    name: str
    extension: str = ""
    metadata: Metadata = Field(default_factory=Metadata)


class DirectorySnapshot(BaseModel):
    """A directory entry with its subtree."""

    path: Path
    metadata: Metadata = Field(default_factory=Metadata)
    children: List["DirectorySnapshot"] = Field(default_factory=list)
    files: List[FileSnapshot] = Field(default_factory=list)


class TreeSnapshot(BaseModel):
    """Top-level document written by ``scan``."""

    version: int = SNAPSHOT_FORMAT_VERSION
    root: DirectorySnapshot
    metrics: Optional[TreeMetrics] = None


DirectorySnapshot.model_rebuild()
