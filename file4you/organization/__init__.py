"""Building, organizing and journaling."""

from .builder import DEFAULT_IGNORE_FILE, TreeBuilder, calculate_max_depth
from .engine import OrganizeEngine, OrganizeResult
from .file_ops import copy_file, copy_tree, generate_unique_filename, move_path
from .params import ConflictResolution, OrganizeParams
from .transaction import (
    OperationType,
    TransactionLog,
    TransactionOperation,
    TransactionStatus,
    rollback_transaction,
)

__all__ = [
    "DEFAULT_IGNORE_FILE",
    "TreeBuilder",
    "calculate_max_depth",
    "OrganizeEngine",
    "OrganizeResult",
    "copy_file",
    "copy_tree",
    "generate_unique_filename",
    "move_path",
    "ConflictResolution",
    "OrganizeParams",
    "OperationType",
    "TransactionLog",
    "TransactionOperation",
    "TransactionStatus",
    "rollback_transaction",
]
