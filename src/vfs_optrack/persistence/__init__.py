"""On-disk formats used by the operation tracker."""

from vfs_optrack.persistence.audit_trail import AUDIT_TRAIL_FILENAME, AuditTrail
from vfs_optrack.persistence.snapshot import SNAPSHOT_FILENAME, SnapshotStore

__all__ = [
    "AUDIT_TRAIL_FILENAME",
    "AuditTrail",
    "SNAPSHOT_FILENAME",
    "SnapshotStore",
]
