"""
Organize engine.

Sorts the files of a ``DirectoryTree`` into category folders below the target
directory. File tasks run on a bounded thread pool; the first failure cancels
the rest of the batch and is reported once every submitted task has finished.
"""

import logging
import os
import threading
import uuid
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Set

from pydantic import BaseModel, Field

from ..core.errors import (
    GitCommandError,
    OperationCancelledError,
    OrganizeError,
    OrganizeTimeoutError,
)
from ..trees import DirectoryNode, DirectoryTree, FileNode, FileTypeTree
from ..vcs.git import GitManager
from .file_ops import copy_file, copy_tree, generate_unique_filename, move_path
from .params import ConflictResolution, OrganizeParams
from .transaction import OperationType, TransactionLog, TransactionStatus, journal_path

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 600.0


class OrganizeResult(BaseModel):
    """Result of an organize run."""

    total_files: int = 0
    organized: int = 0
    skipped: int = 0
    unmapped: int = 0
    renamed: int = 0
    failed: int = 0
    cancelled: int = 0
    dry_run: bool = False
    transaction_id: Optional[str] = None
    committed: bool = False
    errors: List[str] = Field(default_factory=list)


class _RunState:
    """State shared by the file tasks of one run."""

    def __init__(self, external_cancel: Optional[threading.Event] = None):
        self.cancel_event = threading.Event()
        self.external_cancel = external_cancel
        self.lock = threading.Lock()
        self.first_error: Optional[BaseException] = None
        self.error_count = 0
        self.timed_out = False
        self.counts: Dict[str, int] = {}
        self.errors: List[str] = []
        self.claimed: Set[Path] = set()

    def is_cancelled(self) -> bool:
        if self.cancel_event.is_set():
            return True
        return self.external_cancel is not None and self.external_cancel.is_set()

    def increment(self, name: str, count: int = 1) -> None:
        with self.lock:
            self.counts[name] = self.counts.get(name, 0) + count

    def record_error(self, path: Path, error: BaseException) -> None:
        with self.lock:
            if self.first_error is None:
                self.first_error = error
            self.error_count += 1
            self.errors.append(f"{path}: {error}")
        self.cancel_event.set()

    def expire(self) -> None:
        with self.lock:
            self.timed_out = True
        self.cancel_event.set()


class OrganizeEngine:
    """Moves or copies files into category folders."""

    def __init__(
        self,
        git: Optional[GitManager] = None,
        logger: Optional[logging.Logger] = None,
        max_workers: Optional[int] = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        journal_dir: Optional[Path] = None,
    ):
        """
        Initialize the engine.

        Args:
            git: Git manager used when ``git_enabled`` is set
            logger: Logger to use instead of the module logger
            max_workers: Thread pool size (default: CPU count)
            timeout_seconds: Wall-clock limit for one batch
            journal_dir: Where transaction journals are written; None disables
        """
        self.logger = logger or logging.getLogger(__name__)
        self.git = git
        self.max_workers = max_workers or os.cpu_count() or 4
        self.timeout_seconds = timeout_seconds
        self.journal_dir = Path(journal_dir) if journal_dir else None

    def organize(
        self,
        tree: DirectoryTree,
        file_type_tree: FileTypeTree,
        params: OrganizeParams,
        stashed: bool = False,
        cancel_event: Optional[threading.Event] = None,
    ) -> OrganizeResult:
        """
        Organize every file in ``tree``.

        Args:
            tree: Built directory tree of the source
            file_type_tree: Category mapping
            params: Organize options
            stashed: Pop the stash after committing
            cancel_event: Setting it stops tasks that have not started yet

        Returns:
            Counters for the run

        Raises:
            ParamsValidationError: if ``params`` are unusable
            OrganizeError: on the first task failure, timeout, cancellation
                or git failure
        """
        params.validate_params()
        if tree.root is None:
            raise OrganizeError("Directory tree has been cleaned up")

        state = _RunState(external_cancel=cancel_event)

        transaction = TransactionLog(
            transaction_id=str(uuid.uuid4()),
            source_dir=params.source_dir,
            target_dir=params.target_dir,
            dry_run=params.dry_run,
        )

        self.logger.info(
            f"Starting organization of {params.source_dir} into {params.target_dir} "
            f"({'DRY RUN' if params.dry_run else 'LIVE'}, "
            f"{'copy' if params.copy_files else 'move'}, "
            f"conflicts={params.conflict_policy})"
        )

        timer = threading.Timer(self.timeout_seconds, state.expire)
        timer.daemon = True
        timer.start()

        try:
            futures: Dict[Future, FileNode] = {}
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                self._submit_directory(
                    executor,
                    futures,
                    tree.root,
                    file_type_tree,
                    params,
                    transaction,
                    state,
                )

                # Failures were recorded by the tasks themselves
                for future in as_completed(futures):
                    future.exception()
        finally:
            timer.cancel()
            if not params.dry_run:
                self._save_journal(transaction, params)

        result = self._build_result(state, params, transaction, len(futures))
        tree.record_operation("organize")

        if state.first_error is not None:
            raise OrganizeError(
                f"Organize failed ({state.error_count} error(s)): {state.first_error}",
                first_error=state.first_error,
                error_count=state.error_count,
            ) from state.first_error

        if state.timed_out:
            timeout_error = OrganizeTimeoutError(
                f"Organize timed out after {self.timeout_seconds}s"
            )
            raise OrganizeError(
                str(timeout_error), first_error=timeout_error
            ) from timeout_error

        if result.cancelled:
            cancelled_error = OperationCancelledError(
                f"Organize cancelled; {result.cancelled} file(s) not processed"
            )
            raise OrganizeError(
                str(cancelled_error), first_error=cancelled_error
            ) from cancelled_error

        if params.git_enabled and not params.dry_run:
            self._commit(params, result, stashed)

        self.logger.info(
            f"Organization complete: {result.organized} organized, "
            f"{result.skipped} skipped, {result.unmapped} unmapped"
        )
        return result

    def _submit_directory(
        self,
        executor: ThreadPoolExecutor,
        futures: Dict[Future, FileNode],
        node: DirectoryNode,
        file_type_tree: FileTypeTree,
        params: OrganizeParams,
        transaction: TransactionLog,
        state: _RunState,
    ) -> None:
        for file_node in node.files:
            future = executor.submit(
                self._run_file_task,
                file_node,
                file_type_tree,
                params,
                transaction,
                state,
            )
            futures[future] = file_node

        if not params.recursive:
            return

        for child in node.children:
            self._submit_directory(
                executor, futures, child, file_type_tree, params, transaction, state
            )

    def _run_file_task(
        self,
        file_node: FileNode,
        file_type_tree: FileTypeTree,
        params: OrganizeParams,
        transaction: TransactionLog,
        state: _RunState,
    ) -> None:
        try:
            self._organize_file(file_node, file_type_tree, params, transaction, state)
        except Exception as e:
            # Cancels the batch before this worker picks up another file
            state.record_error(file_node.path, e)
            self.logger.error(f"Error organizing {file_node.path}: {e}")
            raise

    def _organize_file(
        self,
        file_node: FileNode,
        file_type_tree: FileTypeTree,
        params: OrganizeParams,
        transaction: TransactionLog,
        state: _RunState,
    ) -> None:
        """
        Organize one file.

        Raises:
            OSError: if the destination folder cannot be created or the
                transfer fails
        """
        if state.is_cancelled():
            state.increment("cancelled")
            return

        category = file_type_tree.find_folder_for_extension(file_node.extension)
        if category is None:
            self.logger.warning(
                f"No category for {file_node.path} "
                f"(extension {file_node.extension or '<none>'})"
            )
            state.increment("unmapped")
            return

        dest_dir = Path(params.target_dir) / category
        dest = dest_dir / file_node.name

        if dest.exists() and os.path.samefile(dest, file_node.path):
            self.logger.debug(f"Already in place: {file_node.path}")
            state.increment("skipped")
            return

        if not params.dry_run:
            dest_dir.mkdir(parents=True, exist_ok=True)

        dest = self._claim_destination(dest, file_node, params, state)
        if dest is None:
            state.increment("skipped")
            return

        operation_type = OperationType.COPY if params.copy_files else OperationType.MOVE

        if params.dry_run:
            self.logger.info(
                f"[DRY RUN] Would {operation_type.value} {file_node.path} → {dest}"
            )
            state.increment("organized")
            return

        operation_id = str(uuid.uuid4())
        transaction.add_operation(
            operation_id,
            file_node.path,
            dest,
            operation_type,
            removed_source=params.copy_files and params.remove_after,
        )
        transaction.update_operation_status(operation_id, TransactionStatus.IN_PROGRESS)

        try:
            if params.copy_files:
                if file_node.path.is_dir():
                    copy_tree(
                        file_node.path, dest, remove=params.remove_after, log=self.logger
                    )
                else:
                    copy_file(
                        file_node.path, dest, remove=params.remove_after, log=self.logger
                    )
            else:
                move_path(file_node.path, dest, log=self.logger)
        except OSError as e:
            transaction.update_operation_status(
                operation_id, TransactionStatus.FAILED, str(e)
            )
            raise

        transaction.update_operation_status(operation_id, TransactionStatus.COMPLETED)
        self.logger.debug(f"{operation_type.value}: {file_node.path} → {dest}")
        state.increment("organized")

    def _claim_destination(
        self,
        dest: Path,
        file_node: FileNode,
        params: OrganizeParams,
        state: _RunState,
    ) -> Optional[Path]:
        """
        Apply the conflict policy and reserve the resulting destination.

        Paths claimed by other tasks of the same run count as existing, so
        two files with the same name never share a destination.

        Returns:
            The destination to write, or None if the file is skipped
        """
        with state.lock:
            if dest in state.claimed or dest.exists():
                policy = params.conflict_policy
                if policy == ConflictResolution.OVERWRITE.value:
                    self.logger.info(f"Overwriting existing file: {dest}")
                elif policy == ConflictResolution.SKIP.value:
                    self.logger.info(f"Skipping {file_node.path}: {dest} exists")
                    return None
                elif policy == ConflictResolution.RENAME.value:
                    dest = generate_unique_filename(dest, reserved=state.claimed)
                    self.logger.info(f"Renaming to avoid conflict: {dest}")
                    state.counts["renamed"] = state.counts.get("renamed", 0) + 1
                else:
                    self.logger.warning(
                        f"Unknown conflict resolution '{policy}', "
                        f"skipping {file_node.path}"
                    )
                    return None
            state.claimed.add(dest)
        return dest

    def _build_result(
        self,
        state: _RunState,
        params: OrganizeParams,
        transaction: TransactionLog,
        total_files: int,
    ) -> OrganizeResult:
        with state.lock:
            counts = dict(state.counts)
            errors = list(state.errors)
            failed = state.error_count

        return OrganizeResult(
            total_files=total_files,
            organized=counts.get("organized", 0),
            skipped=counts.get("skipped", 0),
            unmapped=counts.get("unmapped", 0),
            renamed=counts.get("renamed", 0),
            cancelled=counts.get("cancelled", 0),
            failed=failed,
            dry_run=params.dry_run,
            transaction_id=None if params.dry_run else transaction.transaction_id,
            errors=errors,
        )

    def _save_journal(self, transaction: TransactionLog, params: OrganizeParams) -> None:
        if self.journal_dir is None or not params.journal:
            return

        transaction.completed_at = datetime.now()
        try:
            transaction.save(journal_path(self.journal_dir, transaction.transaction_id))
        except OSError as e:
            self.logger.error(f"Failed to save transaction log: {e}")

    def _commit(
        self, params: OrganizeParams, result: OrganizeResult, stashed: bool
    ) -> None:
        """
        Commit the organized target and restore stashed changes.

        Raises:
            OrganizeError: chained to the failing ``GitCommandError``
        """
        if self.git is None:
            self.git = GitManager(logger=self.logger)

        repo_dir = params.git_repo_dir
        message = (
            f"file4you: organized {result.organized} file(s) "
            f"from {params.source_dir} into {params.target_dir}"
        )
        try:
            self.git.add_and_commit(repo_dir, message)
            result.committed = True
            if stashed:
                self.git.stash_pop(repo_dir, force_overwrite=True)
        except GitCommandError as e:
            raise OrganizeError(
                f"Git operation failed in {repo_dir}: {e}", first_error=e, error_count=1
            ) from e
