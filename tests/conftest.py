"""
Pytest configuration and fixtures for file4you tests.
"""

import shutil
from pathlib import Path

import pytest

from file4you.trees import FileTypeTree

HAS_GIT = shutil.which("git") is not None

TEST_FILE_TYPES = {
    "Notes": [".txt", ".md"],
    "PDFS": [".pdf"],
    "Media/Pics": [".jpg", ".png"],
    "Media/Music": [".mp3"],
    "CODE": [".py"],
}


def pytest_collection_modifyitems(config, items):
    """Skip tests marked ``git`` when the git executable is missing."""
    if HAS_GIT:
        return
    skip_git = pytest.mark.skip(reason="git executable not available")
    for item in items:
        if item.get_closest_marker("git") is not None:
            item.add_marker(skip_git)


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Point HOME at a scratch directory so no test touches real config."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(tmp_path)
    return home


@pytest.fixture
def git_env(monkeypatch):
    """Throwaway git identity for commits made during a test."""
    monkeypatch.setenv("GIT_AUTHOR_NAME", "file4you tests")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "tests@example.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "file4you tests")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "tests@example.com")
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")


@pytest.fixture
def file_type_tree() -> FileTypeTree:
    """Small category mapping with one nested category."""
    return FileTypeTree.from_mapping(TEST_FILE_TYPES)


@pytest.fixture
def source_dir(tmp_path) -> Path:
    """
    Source directory with a mix of mapped and unmapped files.

    source/
        notes.txt
        report.pdf
        photo.jpg
        unknown.xyz
        sub/
            script.py
            deeper/
                song.mp3
    """
    root = tmp_path / "source"
    (root / "sub" / "deeper").mkdir(parents=True)
    (root / "notes.txt").write_text("notes")
    (root / "report.pdf").write_bytes(b"%PDF-1.4 report")
    (root / "photo.jpg").write_bytes(b"\xff\xd8\xff photo")
    (root / "unknown.xyz").write_text("???")
    (root / "sub" / "script.py").write_text("print('hi')\n")
    (root / "sub" / "deeper" / "song.mp3").write_bytes(b"ID3 song")
    return root


@pytest.fixture
def target_dir(tmp_path) -> Path:
    target = tmp_path / "target"
    target.mkdir()
    return target
