"""Tests for the metadata model and tag generation."""

import os
from datetime import datetime, timezone

import pytest

from file4you.core import (
    Metadata,
    MetadataValidationError,
    NodeType,
    TreeMetrics,
    add_tags_to_metadata,
    generate_tags,
    metadata_from_path,
)
from file4you.core.metadata import degraded_metadata

MODIFIED = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


def make_metadata(**overrides) -> Metadata:
    values = dict(
        size=10,
        modified_at=MODIFIED,
        node_type=NodeType.FILE,
        permissions=0o644,
    )
    values.update(overrides)
    return Metadata(**values)


class TestMetadataValidation:
    """Test metadata invariants."""

    def test_valid_metadata(self):
        """Test that complete metadata validates."""
        metadata = make_metadata()
        metadata.validate_metadata()
        assert metadata.is_valid()

    def test_negative_size_rejected(self):
        """Test that a negative size fails validation."""
        with pytest.raises(MetadataValidationError, match="size"):
            make_metadata(size=-1).validate_metadata()

    def test_missing_modified_time_rejected(self):
        """Test that an unset modification time fails validation."""
        with pytest.raises(MetadataValidationError, match="modified"):
            make_metadata(modified_at=None).validate_metadata()

    def test_epoch_modified_time_rejected(self):
        """Test that the unix epoch counts as unset."""
        epoch = datetime(1970, 1, 1, tzinfo=timezone.utc)
        assert not make_metadata(modified_at=epoch).is_valid()

    def test_unknown_node_type_rejected(self):
        """Test that degraded entries are invalid."""
        with pytest.raises(MetadataValidationError, match="node type"):
            make_metadata(node_type=NodeType.UNKNOWN).validate_metadata()

    def test_to_point(self):
        """Test conversion to a spatial index point."""
        created = datetime(2024, 1, 1, tzinfo=timezone.utc)
        point = make_metadata(size=2048, created_at=created, permissions=0o100755).to_point()

        assert point == (
            2048.0,
            float(int(MODIFIED.timestamp())),
            float(int(created.timestamp())),
            float(0o755),
        )

    def test_to_point_without_created_time(self):
        """Test that a missing creation time maps to zero."""
        assert make_metadata().to_point()[2] == 0.0

    def test_to_point_validates(self):
        """Test that invalid metadata cannot become a point."""
        with pytest.raises(MetadataValidationError):
            make_metadata(size=-5).to_point()


class TestTags:
    """Test tag generation."""

    def test_small_file_tags(self):
        """Test tags of a small readable, writable file."""
        assert generate_tags(make_metadata(size=1000, permissions=0o600)) == [
            "file",
            "small",
            "writable",
            "readable",
        ]

    def test_size_classes(self):
        """Test the size class boundaries."""
        assert "small" in generate_tags(make_metadata(size=1000))
        assert "medium" in generate_tags(make_metadata(size=1001))
        assert "medium" in generate_tags(make_metadata(size=1_000_000))
        assert "large" in generate_tags(make_metadata(size=1_000_001))

    def test_directory_kind_tag(self):
        """Test that directories are tagged as folders."""
        tags = generate_tags(make_metadata(node_type=NodeType.DIRECTORY))
        assert tags[0] == "folder"

    def test_permission_tags(self):
        """Test read-only metadata gets no writable tag."""
        tags = generate_tags(make_metadata(permissions=0o444))
        assert "readable" in tags
        assert "writable" not in tags

    def test_generate_tags_validates(self):
        """Test tagging invalid metadata raises."""
        with pytest.raises(MetadataValidationError):
            generate_tags(make_metadata(modified_at=None))

    def test_add_tags_to_metadata(self):
        """Test tags are stored on the metadata."""
        metadata = add_tags_to_metadata(make_metadata())
        assert metadata.tags == ["file", "small", "writable", "readable"]


class TestMetadataFromDisk:
    """Test building metadata from the filesystem."""

    def test_file_metadata(self, tmp_path):
        """Test metadata of a regular file."""
        path = tmp_path / "data.bin"
        path.write_bytes(b"x" * 1500)

        metadata = metadata_from_path(path)

        assert metadata.size == 1500
        assert metadata.node_type == NodeType.FILE
        assert metadata.modified_at is not None
        assert metadata.permissions == os.stat(path).st_mode & 0o7777
        assert "medium" in metadata.tags
        assert metadata.owner

    def test_directory_metadata(self, tmp_path):
        """Test metadata of a directory."""
        metadata = metadata_from_path(tmp_path)
        assert metadata.node_type == NodeType.DIRECTORY
        assert metadata.tags[0] == "folder"

    def test_missing_path_raises(self, tmp_path):
        """Test stat failures propagate."""
        with pytest.raises(OSError):
            metadata_from_path(tmp_path / "missing")

    def test_degraded_metadata(self):
        """Test placeholder metadata for unreadable entries."""
        metadata = degraded_metadata(is_dir=True)
        assert metadata.size == 0
        assert metadata.modified_at is None
        assert metadata.node_type == NodeType.DIRECTORY
        assert not metadata.is_valid()


class TestTreeMetrics:
    """Test the metrics model."""

    def test_record_operation(self):
        """Test operation counters accumulate."""
        metrics = TreeMetrics()
        metrics.record_operation("walk")
        metrics.record_operation("walk")
        metrics.record_operation("build", 3)

        assert metrics.operation_counts == {"walk": 2, "build": 3}
