"""Tests for shared formatting and logging helpers."""

import logging

import pytest
from rich.console import Console
from rich.logging import RichHandler

from file4you.shared.utils import format_bytes, resolve_log_level, setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


class TestFormatBytes:
    """Tests for format_bytes."""

    def test_zero(self) -> None:
        assert format_bytes(0) == "0 B"

    def test_units(self) -> None:
        """Test each unit boundary."""
        assert format_bytes(512) == "512.00 B"
        assert format_bytes(1024) == "1.00 KB"
        assert format_bytes(1536) == "1.50 KB"
        assert format_bytes(1024**2) == "1.00 MB"
        assert format_bytes(5 * 1024**3) == "5.00 GB"

    def test_caps_at_largest_unit(self) -> None:
        """Test huge sizes stay in PB."""
        assert format_bytes(2048 * 1024**5) == "2048.00 PB"


class TestResolveLogLevel:
    """Tests for resolve_log_level."""

    def test_default(self) -> None:
        assert resolve_log_level() == logging.INFO

    def test_flags_win_over_default(self) -> None:
        """Test quiet beats verbose, and both beat the configured name."""
        assert resolve_log_level(verbose=True, default="ERROR") == logging.DEBUG
        assert resolve_log_level(quiet=True, default="DEBUG") == logging.WARNING
        assert resolve_log_level(verbose=True, quiet=True) == logging.WARNING

    def test_configured_name(self) -> None:
        """Test level names are case-insensitive and unknown names fall back."""
        assert resolve_log_level(default="debug") == logging.DEBUG
        assert resolve_log_level(default="Error") == logging.ERROR
        assert resolve_log_level(default="chatty") == logging.INFO


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_installs_rich_handler(self, restore_root_logger) -> None:
        """Test the root logger gets one rich handler on the given console."""
        console = Console(stderr=True)
        setup_logging(verbose=True, console=console)

        root = restore_root_logger
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0], RichHandler)
        assert root.handlers[0].console is console

    def test_replaces_previous_configuration(self, restore_root_logger) -> None:
        """Test calling twice does not stack handlers."""
        setup_logging()
        setup_logging(default_level="WARNING")

        root = restore_root_logger
        assert root.level == logging.WARNING
        assert len(root.handlers) == 1
