"""
Metadata capture and tag generation.

Builds ``Metadata`` values from ``os.stat`` results and derives the
size/kind/permission tags used for discovery.
"""

import logging
import os
import stat
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from .errors import MetadataValidationError
from .types import (
    SIZE_THRESHOLD_MEDIUM,
    SIZE_THRESHOLD_SMALL,
    TAG_PERM_READABLE,
    TAG_PERM_WRITABLE,
    TAG_SIZE_LARGE,
    TAG_SIZE_MEDIUM,
    TAG_SIZE_SMALL,
    TAG_TYPE_DIRECTORY,
    TAG_TYPE_FILE,
    UNKNOWN_OWNER,
    Metadata,
    NodeType,
)

logger = logging.getLogger(__name__)


def generate_tags(metadata: Metadata) -> List[str]:
    """
    Generate tags for a file or directory from its metadata.

    Args:
        metadata: Metadata to tag

    Returns:
        Tags: kind, size class, then permission tags

    Raises:
        MetadataValidationError: if the metadata is invalid
    """
    metadata.validate_metadata()

    tags: List[str] = []

    if metadata.node_type == NodeType.DIRECTORY:
        tags.append(TAG_TYPE_DIRECTORY)
    elif metadata.node_type == NodeType.FILE:
        tags.append(TAG_TYPE_FILE)

    if metadata.size > SIZE_THRESHOLD_MEDIUM:
        tags.append(TAG_SIZE_LARGE)
    elif metadata.size > SIZE_THRESHOLD_SMALL:
        tags.append(TAG_SIZE_MEDIUM)
    else:
        tags.append(TAG_SIZE_SMALL)

    if metadata.permissions & stat.S_IWUSR:
        tags.append(TAG_PERM_WRITABLE)
    if metadata.permissions & stat.S_IRUSR:
        tags.append(TAG_PERM_READABLE)

    return tags


def add_tags_to_metadata(metadata: Metadata) -> Metadata:
    """Replace the tags of ``metadata`` with freshly generated ones."""
    if metadata is None:
        raise MetadataValidationError("metadata cannot be None")
    metadata.tags = generate_tags(metadata)
    return metadata


def _lookup_owner(uid: int) -> str:
    try:
        import pwd
    except ImportError:  # Windows
        return UNKNOWN_OWNER

    try:
        return pwd.getpwuid(uid).pw_name
    except KeyError:
        return UNKNOWN_OWNER


def _birth_time(st: os.stat_result) -> Optional[datetime]:
    birthtime = getattr(st, "st_birthtime", None)
    if not birthtime:
        return None
    return datetime.fromtimestamp(birthtime, tz=timezone.utc)


def metadata_from_stat(st: os.stat_result, is_dir: Optional[bool] = None) -> Metadata:
    """
    Build tagged metadata from a stat result.

    Args:
        st: Result of ``os.stat``/``DirEntry.stat``
        is_dir: Override the node kind (defaults to the stat mode)

    Returns:
        Metadata with tags populated
    """
    if is_dir is None:
        is_dir = stat.S_ISDIR(st.st_mode)

    metadata = Metadata(
        size=st.st_size,
        modified_at=datetime.fromtimestamp(st.st_mtime, tz=timezone.utc),
        created_at=_birth_time(st),
        node_type=NodeType.DIRECTORY if is_dir else NodeType.FILE,
        permissions=stat.S_IMODE(st.st_mode),
        owner=_lookup_owner(st.st_uid),
    )

    try:
        add_tags_to_metadata(metadata)
    except MetadataValidationError as e:
        logger.debug(f"Not tagging metadata: {e}")

    return metadata


def metadata_from_path(path: Path) -> Metadata:
    """
    Build tagged metadata for a path.

    Raises:
        OSError: if the path cannot be stat'ed
    """
    return metadata_from_stat(os.stat(path))


def degraded_metadata(is_dir: bool) -> Metadata:
    """Metadata used when an entry's info cannot be read."""
    return Metadata(node_type=NodeType.DIRECTORY if is_dir else NodeType.FILE)
