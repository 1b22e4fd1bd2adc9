"""Exception types raised during an EAV migration run."""

from typing import Any, Optional


class MigrationError(Exception):
    """Base class for all migration errors."""


class UnresolvedReference(MigrationError):
    """
    A foreign key could not be mapped to a post-migration identifier.

    Row-scoped and non-fatal: stages catch it and drop the referencing row.
    """

    def __init__(self, kind: str, field: str, value: Any):
        self.kind = kind
        self.field = field
        self.value = value
        super().__init__(f"No {kind} identity for {field}={value!r}")


class InconsistentBaseline(MigrationError):
    """The destination baseline snapshot references rows it does not contain."""


class StorageFailure(MigrationError):
    """A record store read, write, backup or rollback call failed."""

    def __init__(self, table: str, operation: str, reason: Optional[str] = None):
        self.table = table
        self.operation = operation
        message = f"Storage {operation} failed for table '{table}'"
        if reason:
            message += f": {reason}"
        super().__init__(message)
