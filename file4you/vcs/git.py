"""
Thin wrapper around the ``git`` binary.

Every command runs as ``git -C <repo> ...`` with a timeout. Commands against
the same repository are serialized by a per-repository lock.
"""

import logging
import re
import subprocess
import threading
from pathlib import Path
from typing import Dict, List, Optional, Union

from ..core.errors import GitCommandError, GitConflictError, RewindTargetError

logger = logging.getLogger(__name__)

DEFAULT_GIT_TIMEOUT = 30.0

COMMIT_ID_PATTERN = re.compile(r"^[a-f0-9]{40}$")
STEP_COUNT_PATTERN = re.compile(r"^[0-9]+$")

STASH_CONFLICT_SIGNATURE = "overwritten by merge"
STASH_CONFLICT_END = "commit your changes"
NO_CHANGES_TO_STASH = "No local changes to save"

PathLike = Union[str, Path]


def parse_conflicting_files(output: str) -> List[str]:
    """
    Extract the files listed in a stash/merge "would be overwritten" error.

    git prints them tab-indented between the signature line and the line
    asking to commit or stash.
    """
    files: List[str] = []
    collecting = False
    for line in output.splitlines():
        if STASH_CONFLICT_SIGNATURE in line:
            collecting = True
            continue
        if not collecting:
            continue
        if STASH_CONFLICT_END in line:
            break
        if line[:1] in ("\t", " ") and line.strip():
            files.append(line.strip())
    return files


class GitManager:
    """Runs git commands for one or more repositories."""

    def __init__(
        self,
        git_binary: str = "git",
        timeout: float = DEFAULT_GIT_TIMEOUT,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the manager.

        Args:
            git_binary: Name or path of the git executable
            timeout: Seconds before a single git command is abandoned
            logger: Logger to use instead of the module logger
        """
        self.git_binary = git_binary
        self.timeout = timeout
        self.logger = logger or logging.getLogger(__name__)
        self._locks: Dict[str, threading.RLock] = {}
        self._locks_guard = threading.Lock()

    def _lock_for(self, repo_dir: PathLike) -> threading.RLock:
        key = str(Path(repo_dir).expanduser().resolve())
        with self._locks_guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.RLock()
                self._locks[key] = lock
            return lock

    def _run(self, repo_dir: PathLike, *args: str) -> str:
        """
        Run one git command in ``repo_dir``.

        Returns:
            Combined stdout and stderr

        Raises:
            GitCommandError: on non-zero exit, timeout, or missing binary
        """
        cmd = [self.git_binary, "-C", str(repo_dir), *args]
        self.logger.debug(f"Running: {' '.join(cmd)}")

        try:
            result = subprocess.run(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise GitCommandError(
                f"git {' '.join(args)} timed out after {self.timeout}s",
                args=args,
            ) from e
        except FileNotFoundError as e:
            raise GitCommandError(
                f"git executable not found: {self.git_binary}", args=args
            ) from e

        output = result.stdout or ""
        if result.returncode != 0:
            raise GitCommandError(
                f"git {' '.join(args)} failed with exit code "
                f"{result.returncode}: {output.strip()}",
                args=args,
                returncode=result.returncode,
                output=output,
            )
        return output

    def is_repo(self, repo_dir: PathLike) -> bool:
        return (Path(repo_dir) / ".git").exists()

    def init_repo(self, repo_dir: PathLike) -> bool:
        """
        Initialize a repository unless one already exists.

        Returns:
            True if a new repository was created
        """
        repo_path = Path(repo_dir)
        with self._lock_for(repo_path):
            if self.is_repo(repo_path):
                self.logger.debug(f"Git repository already exists at {repo_path}")
                return False

            repo_path.mkdir(parents=True, exist_ok=True)
            self._run(repo_path, "init")
            self.logger.info(f"Initialized git repository at {repo_path}")
            return True

    def add(self, repo_dir: PathLike, path: str = ".") -> None:
        with self._lock_for(repo_dir):
            self._run(repo_dir, "add", path)

    def commit(self, repo_dir: PathLike, message: str) -> None:
        """Commit staged changes; an empty commit is allowed."""
        with self._lock_for(repo_dir):
            self._run(repo_dir, "commit", "--allow-empty", "-m", message)
            self.logger.info(f"Committed in {repo_dir}: {message}")

    def add_and_commit(self, repo_dir: PathLike, message: str) -> None:
        with self._lock_for(repo_dir):
            self.add(repo_dir, ".")
            self.commit(repo_dir, message)

    def has_uncommitted_changes(self, repo_dir: PathLike) -> bool:
        with self._lock_for(repo_dir):
            return bool(self._run(repo_dir, "status", "--porcelain").strip())

    def file_has_uncommitted_changes(self, repo_dir: PathLike, path: str) -> bool:
        with self._lock_for(repo_dir):
            output = self._run(repo_dir, "status", "--porcelain", "--", path)
            return bool(output.strip())

    def stash_create(
        self, repo_dir: PathLike, message: str, exclude: Optional[PathLike] = None
    ) -> bool:
        """
        Stash tracked and untracked changes.

        Args:
            repo_dir: Repository
            message: Stash message
            exclude: Path inside the repository whose changes stay in place

        Returns:
            True if a stash entry was created
        """
        args = ["stash", "push", "--include-untracked", "-m", message]
        if exclude is not None:
            args += ["--", f":(exclude){Path(exclude).as_posix()}"]

        with self._lock_for(repo_dir):
            output = self._run(repo_dir, *args)
            if NO_CHANGES_TO_STASH in output:
                self.logger.debug(f"Nothing to stash in {repo_dir}")
                return False
            self.logger.info(f"Stashed changes in {repo_dir}: {message}")
            return True

    def stash_pop(self, repo_dir: PathLike, force_overwrite: bool = False) -> None:
        """
        Re-apply the latest stash.

        When the pop would overwrite files in the working tree and
        ``force_overwrite`` is set, those files are checked out first and the
        stash is applied again, then dropped.

        Raises:
            GitConflictError: on conflicts without ``force_overwrite``; the
                stash is kept
            GitCommandError: on any other failure
        """
        with self._lock_for(repo_dir):
            try:
                self._run(repo_dir, "stash", "pop")
                return
            except GitCommandError as e:
                if STASH_CONFLICT_SIGNATURE not in e.output:
                    raise
                conflicts = parse_conflicting_files(e.output)
                if not force_overwrite:
                    raise GitConflictError(
                        f"Stash pop conflicts with: {', '.join(conflicts)}",
                        files=conflicts,
                        output=e.output,
                    ) from e

            self.logger.warning(
                f"Overwriting {len(conflicts)} conflicting file(s) to pop stash"
            )
            for path in conflicts:
                self.checkout_file(repo_dir, path)
            self._run(repo_dir, "stash", "apply")
            self._run(repo_dir, "stash", "drop")

    def clear_uncommitted_changes(self, repo_dir: PathLike) -> None:
        """Discard all modifications and untracked files."""
        with self._lock_for(repo_dir):
            self._run(repo_dir, "reset", "--hard")
            self._run(repo_dir, "clean", "-d", "-f")

    def checkout_file(self, repo_dir: PathLike, path: str) -> None:
        with self._lock_for(repo_dir):
            self._run(repo_dir, "checkout", "--", path)

    def get_commit_history(self, repo_dir: PathLike) -> List[str]:
        """Commit ids reachable from any ref, newest first."""
        with self._lock_for(repo_dir):
            output = self._run(repo_dir, "rev-list", "--all")
        return [line.strip() for line in output.splitlines() if line.strip()]

    def rewind(self, repo_dir: PathLike, target: Union[str, int]) -> str:
        """
        Check out an earlier commit.

        Args:
            repo_dir: Repository
            target: Full commit id, or number of steps back (0 = latest)

        Returns:
            The checked-out commit id

        Raises:
            RewindTargetError: if ``target`` does not name a commit; nothing
                is checked out
            GitCommandError: if the checkout fails
        """
        with self._lock_for(repo_dir):
            commit_id = self._resolve_target(repo_dir, target)
            self._run(repo_dir, "checkout", commit_id)
            self.logger.info(f"Rewound {repo_dir} to {commit_id}")
            return commit_id

    def _resolve_target(self, repo_dir: PathLike, target: Union[str, int]) -> str:
        text = str(target).strip()
        if COMMIT_ID_PATTERN.match(text):
            return text

        if not STEP_COUNT_PATTERN.match(text):
            raise RewindTargetError(
                f"Invalid rewind target '{target}': not a commit id or step count"
            )
        steps = int(text)

        history = self.get_commit_history(repo_dir)
        if steps >= len(history):
            raise RewindTargetError(
                f"Rewind target {steps} out of range "
                f"(history has {len(history)} commit(s))"
            )
        return history[steps]
