"""
Application configuration.

Settings come from a TOML file (explicit path, workspace or global) and may be
overridden by ``FILE4YOU_*`` environment variables.
"""

import logging
import tomllib
from pathlib import Path
from typing import Dict, List, Optional, Union

import tomli_w
from pydantic import ConfigDict, Field
from pydantic_settings import BaseSettings

from .organization.builder import DEFAULT_IGNORE_FILE
from .trees import FileTypeTree

logger = logging.getLogger(__name__)

APP_NAME = "file4you"
WORKSPACE_CONFIG_FILE = Path(f".{APP_NAME}") / "config.toml"

DEFAULT_FILE_TYPES: Dict[str, List[str]] = {
    "Notes": [".md", ".rtf", ".txt"],
    "Docs": [".doc", ".docx", ".xls", ".xlsx", ".ppt", ".pptx"],
    "EXE": [".exe", ".appimage", ".msi"],
    "Vids": [".mp4", ".mov", ".avi", ".mkv"],
    "Compressed": [".zip", ".rar", ".tar", ".gz", ".7z"],
    "Scripts": [".sh", ".bat"],
    "Installers": [".deb", ".rpm"],
    "Books": [".epub", ".mobi"],
    "Music": [".mp3", ".wav", ".ogg", ".flac"],
    "PDFS": [".pdf"],
    "Pics": [".bmp", ".gif", ".jpg", ".jpeg", ".svg", ".png"],
    "Torrents": [".torrent"],
    "CODE": [
        ".c", ".h", ".py", ".rs", ".go", ".js", ".ts", ".jsx", ".tsx", ".html",
        ".css", ".php", ".java", ".cpp", ".cs", ".vb", ".sql", ".pl", ".swift",
        ".kt", ".r", ".m", ".asm",
    ],
    "Markup": [
        ".json", ".xml", ".yml", ".yaml", ".ini", ".toml", ".cfg", ".conf", ".log",
    ],
}  # fmt: skip


def config_home() -> Path:
    return Path.home() / ".config" / APP_NAME


def global_config_path() -> Path:
    return config_home() / "config.toml"


class AppConfig(BaseSettings):
    """Application settings loaded from TOML and environment variables."""

    file_types: Dict[str, List[str]] = Field(
        default_factory=lambda: {k: list(v) for k, v in DEFAULT_FILE_TYPES.items()}
    )
    target_dir: Optional[Path] = None
    cache_dir: Path = Field(default_factory=lambda: config_home() / ".cache")
    log_level: str = "INFO"

    # Organize engine
    max_workers: Optional[int] = None
    organize_timeout_seconds: float = 600.0

    # Git
    git_timeout_seconds: float = 30.0

    ignore_file_name: str = DEFAULT_IGNORE_FILE

    model_config = ConfigDict(
        env_prefix="FILE4YOU_",
        extra="ignore",
    )

    @property
    def transactions_dir(self) -> Path:
        """Directory holding transaction journals."""
        return Path(self.cache_dir).expanduser() / "transactions"


def _find_config_file(path: Optional[Union[str, Path]]) -> Optional[Path]:
    if path is not None and Path(path).expanduser().is_file():
        return Path(path).expanduser()

    workspace = Path.cwd() / WORKSPACE_CONFIG_FILE
    if workspace.is_file():
        return workspace

    global_path = global_config_path()
    if global_path.is_file():
        return global_path

    return None


def load_config(path: Optional[Union[str, Path]] = None) -> AppConfig:
    """
    Load configuration.

    Looks at ``path`` first, then ``.file4you/config.toml`` in the current
    directory, then the global config. When none exists the defaults are
    written to the global location.

    Raises:
        tomllib.TOMLDecodeError: if the config file is not valid TOML
        pydantic.ValidationError: if a setting has the wrong type
    """
    config_path = _find_config_file(path)

    if config_path is None:
        config = AppConfig()
        target = global_config_path()
        try:
            save_config(config, target)
            logger.info(f"Default config file created at {target}")
        except OSError as e:
            logger.warning(f"Could not write default config to {target}: {e}")
        return config

    logger.debug(f"Loading config file from {config_path}")
    with open(config_path, "rb") as f:
        data = tomllib.load(f)

    return AppConfig(**data)


def save_config(config: AppConfig, path: Union[str, Path]) -> None:
    """Write ``config`` as TOML, creating parent directories."""
    path = Path(path).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)

    data = config.model_dump(mode="json", exclude_none=True)
    with open(path, "wb") as f:
        tomli_w.dump(data, f)


def build_file_type_tree(config: AppConfig) -> FileTypeTree:
    """Build the category mapping tree from ``config.file_types``."""
    return FileTypeTree.from_mapping(config.file_types)
