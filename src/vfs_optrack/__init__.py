"""vfs-optrack: durable operation tracking and audit logging for file sync."""

from vfs_optrack.audit.log import AuditLog
from vfs_optrack.domain.operations import (
    AuditLogEntry,
    Operation,
    OperationStatus,
    OperationType,
)
from vfs_optrack.errors import (
    InvalidTransitionError,
    OperationNotFoundError,
    OperationTrackerError,
    PersistenceError,
)
from vfs_optrack.tracker import OperationTracker

__version__ = "0.1.0"
__all__ = [
    "AuditLog",
    "AuditLogEntry",
    "InvalidTransitionError",
    "Operation",
    "OperationNotFoundError",
    "OperationStatus",
    "OperationTracker",
    "OperationTrackerError",
    "OperationType",
    "PersistenceError",
]
