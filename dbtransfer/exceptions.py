"""Exception hierarchy for dbtransfer.

Every error raised by the transfer pipeline derives from ``TransferError``
and carries a context dictionary that is rendered into ``str()`` so that a
single log line tells which task, table or batch was involved.

Per-task errors (source, transform, schema, write) are caught by the task
runner and recorded in the task's result. ``RunFatalError`` is the only
error that ends a whole run.
"""

from typing import Any, Dict, Optional


class TransferError(Exception):
    """Base exception for all dbtransfer errors."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
        }

    def __str__(self) -> str:
        if not self.context:
            return self.message
        context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
        return f"{self.message} (Context: {context_str})"


class ConfigurationError(TransferError):
    """The configuration file is missing, malformed or inconsistent."""


class SourceConnectionError(TransferError):
    """The source database could not be reached."""


class SourceQueryError(TransferError):
    """The source query failed or exceeded its timeout."""


class TransformError(TransferError):
    """The row transform hook raised."""


class DestinationConnectionError(TransferError):
    """The destination database could not be reached."""


class SchemaError(TransferError):
    """The destination rejected the CREATE TABLE statement."""


class WriteError(TransferError):
    """A batch insert failed.

    Batches committed before the failing one stay in the destination.
    """

    def __init__(
        self,
        message: str,
        batch_index: int,
        rows_committed: int,
        context: Optional[Dict[str, Any]] = None,
    ):
        write_context = {"batch_index": batch_index, "rows_committed": rows_committed}
        if context:
            write_context.update(context)
        super().__init__(message, context=write_context)
        self.batch_index = batch_index
        self.rows_committed = rows_committed


class ConfigResolutionError(TransferError):
    """A task names a destination profile that does not exist.

    Non-fatal: the runner logs it and falls back to the default destination.
    """


class RunFatalError(TransferError):
    """A failure outside the scope of any single task."""
