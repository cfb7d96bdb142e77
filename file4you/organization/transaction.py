"""
Transaction journal for organize runs.

Records every file operation so a run can be inspected and reversed later.
"""

import json
import logging
import shutil
import threading
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from ..core.errors import TransactionNotFoundError
from .file_ops import move_path

logger = logging.getLogger(__name__)


class TransactionStatus(str, Enum):
    """Status of a journaled operation."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"
    ROLLED_BACK = "rolled_back"


class OperationType(str, Enum):
    """Kind of file operation."""

    COPY = "copy"
    MOVE = "move"


class TransactionOperation(BaseModel):
    """A single file operation in a transaction."""

    operation_id: str = Field(description="Unique operation ID")
    source_path: Path = Field(description="Source file path")
    target_path: Path = Field(description="Target file path")
    operation_type: OperationType = Field(description="Operation type (copy/move)")
    removed_source: bool = Field(
        default=False, description="Whether the source was deleted after a copy"
    )
    status: TransactionStatus = Field(
        default=TransactionStatus.PENDING,
        description="Operation status",
    )
    timestamp: datetime = Field(
        default_factory=datetime.now,
        description="When operation was logged",
    )
    error_message: Optional[str] = Field(
        default=None, description="Error message if failed"
    )

    model_config = ConfigDict(use_enum_values=True)


class TransactionLog(BaseModel):
    """Journal of one organize run."""

    transaction_id: str = Field(description="Unique transaction ID")
    source_dir: Optional[Path] = None
    target_dir: Optional[Path] = None
    started_at: datetime = Field(
        default_factory=datetime.now,
        description="When transaction started",
    )
    completed_at: Optional[datetime] = Field(
        default=None, description="When transaction completed"
    )
    operations: List[TransactionOperation] = Field(
        default_factory=list, description="List of operations"
    )
    dry_run: bool = Field(default=False, description="Whether this was a dry run")

    _lock: threading.Lock = PrivateAttr(default_factory=threading.Lock)

    def add_operation(
        self,
        operation_id: str,
        source_path: Path,
        target_path: Path,
        operation_type: OperationType,
        removed_source: bool = False,
    ) -> TransactionOperation:
        """
        Add an operation to the journal.

        Safe to call from several worker threads.
        """
        operation = TransactionOperation(
            operation_id=operation_id,
            source_path=source_path,
            target_path=target_path,
            operation_type=operation_type,
            removed_source=removed_source,
        )
        with self._lock:
            self.operations.append(operation)
        return operation

    def update_operation_status(
        self,
        operation_id: str,
        status: TransactionStatus,
        error_message: Optional[str] = None,
    ) -> None:
        """Update the status of an operation."""
        with self._lock:
            for op in self.operations:
                if op.operation_id == operation_id:
                    op.status = status
                    if error_message:
                        op.error_message = error_message
                    return

    def get_statistics(self) -> Dict[str, int]:
        """Operation counts by status, plus ``total``."""
        stats = {status.value: 0 for status in TransactionStatus}
        stats["total"] = len(self.operations)

        for op in self.operations:
            key = TransactionStatus(op.status).value
            stats[key] = stats.get(key, 0) + 1

        return stats

    def is_complete(self) -> bool:
        """True once no operation is pending or in progress."""
        return not any(
            op.status in (TransactionStatus.PENDING, TransactionStatus.IN_PROGRESS)
            for op in self.operations
        )

    def has_failures(self) -> bool:
        return any(op.status == TransactionStatus.FAILED for op in self.operations)

    def get_rollback_operations(self) -> List[TransactionOperation]:
        """Completed operations, in the order they were journaled."""
        return [
            op for op in self.operations if op.status == TransactionStatus.COMPLETED
        ]

    def save(self, log_path: Path) -> None:
        """Write the journal as JSON."""
        log_path.parent.mkdir(parents=True, exist_ok=True)

        with open(log_path, "w", encoding="utf-8") as f:
            json.dump(self.model_dump(mode="json"), f, indent=2, default=str)

        logger.info(f"Saved transaction log to {log_path}")

    @classmethod
    def load(cls, log_path: Path) -> "TransactionLog":
        """
        Load a journal from disk.

        Raises:
            TransactionNotFoundError: if the file does not exist
        """
        if not log_path.exists():
            raise TransactionNotFoundError(f"Transaction log not found: {log_path}")

        with open(log_path, "r", encoding="utf-8") as f:
            data = json.load(f)

        return cls.model_validate(data)


def journal_path(journal_dir: Path, transaction_id: str) -> Path:
    return Path(journal_dir) / f"{transaction_id}.json"


def rollback_transaction(
    log: TransactionLog, log_obj: Optional[logging.Logger] = None
) -> int:
    """
    Reverse the completed operations of a journal, newest first.

    A copy is undone by deleting its target, unless the copy removed the
    source, in which case the target is moved back like a move.

    Returns:
        Number of operations rolled back
    """
    log_obj = log_obj or logger
    operations = log.get_rollback_operations()
    operations.reverse()

    rolled_back = 0
    for op in operations:
        target = Path(op.target_path)
        source = Path(op.source_path)

        if not target.exists():
            log_obj.warning(f"Cannot roll back {op.operation_id}: {target} is gone")
            continue

        source.parent.mkdir(parents=True, exist_ok=True)
        if op.operation_type == OperationType.COPY and not op.removed_source:
            if target.is_dir():
                shutil.rmtree(target)
            else:
                target.unlink()
            log_obj.info(f"Deleted copied file: {target}")
        else:
            move_path(target, source, log=log_obj)
            log_obj.info(f"Moved back: {target} → {source}")

        log.update_operation_status(op.operation_id, TransactionStatus.ROLLED_BACK)
        rolled_back += 1

    log.completed_at = datetime.now()
    return rolled_back
