"""Tests for configuration loading."""

import tomllib
from pathlib import Path

import pytest
import tomli_w

from file4you.config import (
    DEFAULT_FILE_TYPES,
    AppConfig,
    build_file_type_tree,
    global_config_path,
    load_config,
    save_config,
)


class TestAppConfig:
    """Test settings defaults and overrides."""

    def test_defaults(self, isolated_home):
        """Test the default settings."""
        config = AppConfig()

        assert config.file_types == DEFAULT_FILE_TYPES
        assert config.cache_dir == isolated_home / ".config" / "file4you" / ".cache"
        assert config.log_level == "INFO"
        assert config.organize_timeout_seconds == 600
        assert config.git_timeout_seconds == 30
        assert config.ignore_file_name == ".file4you-ignore"

    def test_environment_override(self, monkeypatch):
        """Test FILE4YOU_* variables override defaults."""
        monkeypatch.setenv("FILE4YOU_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("FILE4YOU_MAX_WORKERS", "3")

        config = AppConfig()

        assert config.log_level == "DEBUG"
        assert config.max_workers == 3

    def test_transactions_dir(self, tmp_path):
        """Test journals live under the cache directory."""
        config = AppConfig(cache_dir=tmp_path / "cache")
        assert config.transactions_dir == tmp_path / "cache" / "transactions"


class TestLoadConfig:
    """Test locating and reading config files."""

    def test_writes_default_when_missing(self, isolated_home):
        """Test the default config is written to the global location."""
        config = load_config()

        path = global_config_path()
        assert path == isolated_home / ".config" / "file4you" / "config.toml"
        assert path.exists()
        with open(path, "rb") as f:
            data = tomllib.load(f)
        assert data["file_types"]["PDFS"] == [".pdf"]
        assert config.file_types == DEFAULT_FILE_TYPES

    def test_explicit_path(self, tmp_path):
        """Test an explicit file wins."""
        path = tmp_path / "custom.toml"
        path.write_text('log_level = "WARNING"\n\n[file_types]\nDocs = [".odt"]\n')

        config = load_config(path)

        assert config.log_level == "WARNING"
        assert config.file_types == {"Docs": [".odt"]}

    def test_workspace_config(self, tmp_path):
        """Test .file4you/config.toml in the working directory."""
        workspace = tmp_path / ".file4you"
        workspace.mkdir()
        (workspace / "config.toml").write_text('[file_types]\nTxt = [".txt"]\n')

        config = load_config()

        assert config.file_types == {"Txt": [".txt"]}
        assert not global_config_path().exists()

    def test_missing_explicit_path_falls_back(self, tmp_path):
        """Test a missing explicit path falls back to the defaults."""
        config = load_config(tmp_path / "nope.toml")
        assert config.file_types == DEFAULT_FILE_TYPES

    def test_invalid_toml(self, tmp_path):
        """Test malformed files raise."""
        path = tmp_path / "bad.toml"
        path.write_text("file_types = [unclosed\n")

        with pytest.raises(tomllib.TOMLDecodeError):
            load_config(path)


class TestSaveConfig:
    """Test writing config files."""

    def test_round_trip(self, tmp_path):
        """Test a saved config loads back equal."""
        config = AppConfig(
            file_types={"Media/Pics": [".png"], "Notes": [".txt"]},
            target_dir=Path("/sorted"),
            cache_dir=tmp_path / "cache",
            max_workers=2,
        )
        path = tmp_path / "out" / "config.toml"

        save_config(config, path)
        loaded = load_config(path)

        assert loaded == config
        assert list(loaded.file_types) == ["Media/Pics", "Notes"]

    def test_none_values_omitted(self, tmp_path):
        """Test unset optional settings are not written."""
        path = tmp_path / "config.toml"
        save_config(AppConfig(), path)

        with open(path, "rb") as f:
            data = tomllib.load(f)
        assert "target_dir" not in data
        assert "max_workers" not in data


class TestBuildFileTypeTree:
    """Test building the mapping tree from config."""

    def test_default_mapping(self):
        """Test the defaults map common extensions."""
        tree = build_file_type_tree(AppConfig())

        assert tree.find_folder_for_extension(".pdf") == Path("PDFS")
        assert tree.find_folder_for_extension(".py") == Path("CODE")
        assert tree.find_folder_for_extension(".toml") == Path("Markup")

    def test_nested_mapping(self):
        """Test nested categories from TOML keys."""
        data = tomllib.loads(tomli_w.dumps({"file_types": {"Media/Pics": ["jpg"]}}))
        tree = build_file_type_tree(AppConfig(**data))
        assert tree.find_folder_for_extension(".jpg") == Path("Media/Pics")
