"""
Exception hierarchy for file4you.

Filesystem failures are left as ``OSError`` and wrapped by the organize
engine; everything raised on purpose derives from ``File4YouError``.
"""

from typing import Optional, Sequence


class File4YouError(Exception):
    """Base class for all file4you errors."""

    pass


class ParamsValidationError(File4YouError, ValueError):
    """Raised when operation parameters are rejected before any I/O."""

    pass


class MetadataValidationError(File4YouError, ValueError):
    """Raised when node metadata fails validation."""

    pass


class OperationCancelledError(File4YouError):
    """Raised when a cancellable operation notices it was cancelled."""

    pass


class OrganizeTimeoutError(File4YouError, TimeoutError):
    """Raised when an organize batch exceeds its wall-clock timeout."""

    pass


class OrganizeError(File4YouError):
    """Aggregate failure of an organize batch.

    Only the first failure is carried; ``error_count`` says how many file
    tasks failed in total.
    """

    def __init__(
        self,
        message: str,
        first_error: Optional[BaseException] = None,
        error_count: int = 0,
    ):
        super().__init__(message)
        self.first_error = first_error
        self.error_count = error_count


class GitCommandError(File4YouError):
    """Raised when a git invocation fails, times out or cannot start."""

    def __init__(
        self,
        message: str,
        args: Sequence[str] = (),
        returncode: Optional[int] = None,
        output: str = "",
    ):
        super().__init__(message)
        self.command_args = list(args)
        self.returncode = returncode
        self.output = output


class GitConflictError(GitCommandError):
    """Raised when popping a stash conflicts with the working tree."""

    def __init__(self, message: str, files: Sequence[str] = (), output: str = ""):
        super().__init__(message, args=("stash", "pop"), output=output)
        self.files = list(files)


class RewindTargetError(GitCommandError):
    """Raised when a rewind target cannot be resolved to a commit."""

    pass


class TransactionNotFoundError(File4YouError, LookupError):
    """Raised when a transaction journal does not exist."""

    pass
