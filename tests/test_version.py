"""Tests for version module."""

import subprocess
from unittest.mock import MagicMock, patch

from file4you.version import SOURCE_ROOT, __version__, get_git_hash, get_version_string


class TestVersion:
    """Tests for version functions."""

    def test_version_constant(self) -> None:
        """Test that version constant is a dotted string."""
        assert isinstance(__version__, str)
        assert __version__.count(".") == 2

    @patch("file4you.version.subprocess.run")
    def test_get_git_hash_success(self, mock_run: MagicMock) -> None:
        """Test the hash is read from git output."""
        mock_run.return_value = MagicMock(stdout="abc1234\n")

        assert get_git_hash() == "abc1234"
        args = mock_run.call_args[0][0]
        assert args[:3] == ["git", "-C", str(SOURCE_ROOT)]
        assert "--short=7" in args

    @patch("file4you.version.subprocess.run")
    def test_get_git_hash_empty_output(self, mock_run: MagicMock) -> None:
        """Test empty output is treated as no hash."""
        mock_run.return_value = MagicMock(stdout="")
        assert get_git_hash() is None

    @patch("file4you.version.subprocess.run")
    def test_get_git_hash_called_process_error(self, mock_run: MagicMock) -> None:
        """Test get_git_hash handles CalledProcessError."""
        mock_run.side_effect = subprocess.CalledProcessError(128, "git")
        assert get_git_hash() is None

    @patch("file4you.version.subprocess.run")
    def test_get_git_hash_timeout_expired(self, mock_run: MagicMock) -> None:
        """Test get_git_hash handles TimeoutExpired."""
        mock_run.side_effect = subprocess.TimeoutExpired("git", 2)
        assert get_git_hash() is None

    @patch("file4you.version.subprocess.run")
    def test_get_git_hash_file_not_found(self, mock_run: MagicMock) -> None:
        """Test get_git_hash handles a missing git binary."""
        mock_run.side_effect = FileNotFoundError("git command not found")
        assert get_git_hash() is None

    def test_get_version_string_with_git_hash(self) -> None:
        """Test version string includes git hash when available."""
        with patch("file4you.version.get_git_hash", return_value="abc1234"):
            assert get_version_string() == f"{__version__} (git:abc1234)"

    def test_get_version_string_without_git_hash(self) -> None:
        """Test version string without git hash when not available."""
        with patch("file4you.version.get_git_hash", return_value=None):
            result = get_version_string()
            assert result == __version__
            assert "git:" not in result
