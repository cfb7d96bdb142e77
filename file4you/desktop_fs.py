"""
High-level entry point tying the builder, engine, git layer and journal
together.
"""

import logging
from pathlib import Path
from typing import List, Optional, Union

from .config import AppConfig, build_file_type_tree
from .core.errors import ParamsValidationError
from .core.metadata import metadata_from_path
from .organization.builder import TreeBuilder, calculate_max_depth
from .organization.engine import OrganizeEngine, OrganizeResult
from .organization.params import OrganizeParams
from .organization.transaction import TransactionLog, journal_path, rollback_transaction
from .trees import DirectoryNode, DirectoryTree, FileTypeTree
from .vcs.git import GitManager

logger = logging.getLogger(__name__)


class DesktopFS:
    """Organize, scan and version a desktop-style directory."""

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.config = config or AppConfig()
        self.logger = logger or logging.getLogger(__name__)
        self.file_type_tree: FileTypeTree = build_file_type_tree(self.config)
        self.builder = TreeBuilder(
            ignore_file_name=self.config.ignore_file_name, logger=self.logger
        )
        self.git = GitManager(timeout=self.config.git_timeout_seconds, logger=self.logger)
        self.engine = OrganizeEngine(
            git=self.git,
            logger=self.logger,
            max_workers=self.config.max_workers,
            timeout_seconds=self.config.organize_timeout_seconds,
            journal_dir=self.config.transactions_dir,
        )

    def index_directory(self, params: OrganizeParams) -> DirectoryTree:
        """
        Build the tree for ``params.source_dir``.

        A ``max_depth`` of 0 or None means the real depth is computed first.
        """
        if params.source_dir is None:
            raise ParamsValidationError("source directory must be specified")

        max_depth = params.max_depth
        if not max_depth:
            max_depth = calculate_max_depth(params.source_dir)

        return self.builder.build(
            params.source_dir, recursive=params.recursive, max_depth=max_depth
        )

    def organize(self, params: OrganizeParams) -> OrganizeResult:
        """
        Index the source and organize it into the target.

        Raises:
            ParamsValidationError: on unusable parameters
            OrganizeError: if organizing or committing fails
            GitCommandError: if preparing the repository fails
        """
        params.validate_params()

        if not params.dry_run:
            Path(params.target_dir).mkdir(parents=True, exist_ok=True)

        tree = self.index_directory(params)
        try:
            stashed = False
            if params.git_enabled and not params.dry_run:
                stashed = self._prepare_repo(params)

            return self.engine.organize(
                tree, self.file_type_tree, params, stashed=stashed
            )
        finally:
            tree.cleanup()

    def _prepare_repo(self, params: OrganizeParams) -> bool:
        """
        Initialize the repository and stash unrelated uncommitted work.

        Changes below the source directory are never stashed, since they are
        the files being organized. A repository that lies inside the source is
        not stashed at all.

        Returns:
            True if a stash entry was created
        """
        repo_dir = params.git_repo_dir
        self.git.init_repo(repo_dir)
        if not params.stash_changes:
            return False

        repo = repo_dir.expanduser().resolve()
        source = Path(params.source_dir).expanduser().resolve()
        if repo == source or source in repo.parents:
            self.logger.info(
                f"Not stashing {repo}: it holds only files being organized"
            )
            return False

        if not (
            self.git.get_commit_history(repo)
            and self.git.has_uncommitted_changes(repo)
        ):
            return False

        exclude = source.relative_to(repo) if repo in source.parents else None
        return self.git.stash_create(
            repo, "file4you: changes before organize", exclude=exclude
        )

    def scan(self, root: Union[str, Path], recursive: bool = True) -> DirectoryTree:
        """Build and return the tree for ``root``; the caller owns it."""
        return self.builder.build(root, recursive=recursive)

    def similar_directories(
        self,
        root: Union[str, Path],
        reference: Union[str, Path],
        k: Optional[int] = None,
        radius: Optional[float] = None,
    ) -> List[DirectoryNode]:
        """
        Directories under ``root`` whose metadata is closest to ``reference``.

        Exactly one of ``k`` and ``radius`` selects the query kind; ``k``
        defaults to 5 when neither is given.
        """
        if k is not None and radius is not None:
            raise ParamsValidationError("pass either k or radius, not both")

        query = metadata_from_path(Path(reference).expanduser().resolve())
        tree = self.scan(root)
        tree.build_kd_tree()

        if radius is not None:
            return tree.range_search(query, radius)
        return tree.nearest_neighbors(query, k if k is not None else 5)

    def history(self, repo_dir: Union[str, Path]) -> List[str]:
        return self.git.get_commit_history(repo_dir)

    def rewind(self, repo_dir: Union[str, Path], target: Union[str, int]) -> str:
        return self.git.rewind(repo_dir, target)

    def undo(self, transaction_id: str) -> int:
        """
        Reverse a completed organize run from its journal.

        Returns:
            Number of operations reverted

        Raises:
            TransactionNotFoundError: if no journal has that id
        """
        path = journal_path(self.config.transactions_dir, transaction_id)
        log = TransactionLog.load(path)
        reverted = rollback_transaction(log, self.logger)
        log.save(path)
        self.logger.info(f"Reverted {reverted} operation(s) of {transaction_id}")
        return reverted
