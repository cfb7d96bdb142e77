"""
Parameters for organize operations.
"""

from enum import Enum
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..core.errors import ParamsValidationError


class ConflictResolution(str, Enum):
    """What to do when the destination file already exists."""

    OVERWRITE = "overwrite"
    SKIP = "skip"
    RENAME = "rename"


class OrganizeParams(BaseModel):
    """Options controlling one organize run."""

    source_dir: Optional[Path] = Field(default=None, description="Directory to organize")
    target_dir: Optional[Path] = Field(
        default=None, description="Directory receiving the category folders"
    )
    recursive: bool = Field(default=True, description="Descend into subdirectories")
    copy_files: bool = Field(default=False, description="Copy instead of move")
    remove_after: bool = Field(
        default=False, description="Delete the source after a successful copy"
    )
    dry_run: bool = Field(default=False, description="Log actions without executing")
    # Unknown policy strings are accepted; the engine treats them as skip.
    conflict_resolution: Union[ConflictResolution, str] = Field(
        default=ConflictResolution.RENAME
    )
    git_enabled: bool = Field(default=False, description="Commit the result to git")
    repo_dir: Optional[Path] = Field(
        default=None, description="Repository to commit into (defaults to target_dir)"
    )
    stash_changes: bool = Field(
        default=False, description="Stash uncommitted changes before organizing"
    )
    max_depth: Optional[int] = Field(
        default=None, description="Build depth limit; None computes it"
    )
    journal: bool = Field(default=True, description="Write a transaction journal")

    model_config = ConfigDict(use_enum_values=True)

    @field_validator("source_dir", "target_dir", "repo_dir", mode="before")
    @classmethod
    def _blank_path_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def validate_params(self) -> None:
        """
        Reject unusable parameters before any I/O happens.

        Raises:
            ParamsValidationError: on missing directories or negative depth
        """
        if self.source_dir is None:
            raise ParamsValidationError("source and target directories must be specified")
        if self.target_dir is None:
            raise ParamsValidationError("source and target directories must be specified")
        if self.max_depth is not None and self.max_depth < 0:
            raise ParamsValidationError("max depth cannot be negative")

    @property
    def git_repo_dir(self) -> Path:
        """Repository directory used for git integration."""
        return Path(self.repo_dir or self.target_dir)  # type: ignore[arg-type]

    @property
    def conflict_policy(self) -> str:
        value = self.conflict_resolution
        return value.value if isinstance(value, ConflictResolution) else str(value)
