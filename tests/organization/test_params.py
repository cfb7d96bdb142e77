"""Tests for organize parameters."""

from pathlib import Path

import pytest

from file4you.core import ParamsValidationError
from file4you.organization import ConflictResolution, OrganizeParams


class TestOrganizeParams:
    """Test parameter validation and defaults."""

    def test_defaults(self):
        """Test default values."""
        params = OrganizeParams(source_dir="/src", target_dir="/dst")

        assert params.recursive is True
        assert params.copy_files is False
        assert params.dry_run is False
        assert params.conflict_policy == "rename"
        assert params.journal is True

    def test_missing_source(self):
        """Test a missing source directory is rejected."""
        with pytest.raises(ParamsValidationError):
            OrganizeParams(target_dir="/dst").validate_params()

    def test_blank_target(self):
        """Test a blank target directory is rejected."""
        with pytest.raises(ParamsValidationError):
            OrganizeParams(source_dir="/src", target_dir="  ").validate_params()

    def test_negative_depth(self):
        """Test a negative depth limit is rejected."""
        params = OrganizeParams(source_dir="/src", target_dir="/dst", max_depth=-1)
        with pytest.raises(ParamsValidationError):
            params.validate_params()

    def test_validation_error_is_value_error(self):
        """Test callers can catch ValueError."""
        with pytest.raises(ValueError):
            OrganizeParams().validate_params()

    def test_git_repo_defaults_to_target(self):
        """Test the repository falls back to the target directory."""
        params = OrganizeParams(source_dir="/src", target_dir="/dst")
        assert params.git_repo_dir == Path("/dst")

        params = OrganizeParams(source_dir="/src", target_dir="/dst", repo_dir="/repo")
        assert params.git_repo_dir == Path("/repo")

    def test_conflict_policy_values(self):
        """Test enum and string policies."""
        params = OrganizeParams(
            source_dir="/src",
            target_dir="/dst",
            conflict_resolution=ConflictResolution.SKIP,
        )
        assert params.conflict_policy == "skip"

        params = OrganizeParams(
            source_dir="/src", target_dir="/dst", conflict_resolution="merge"
        )
        assert params.conflict_policy == "merge"
