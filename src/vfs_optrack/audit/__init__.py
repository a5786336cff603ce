"""Compacted audit log and its legacy import path."""

from vfs_optrack.audit.legacy_import import import_legacy_trail, legacy_trail_path
from vfs_optrack.audit.log import AUDIT_LOG_FILENAME, AuditLog

__all__ = [
    "AUDIT_LOG_FILENAME",
    "AuditLog",
    "import_legacy_trail",
    "legacy_trail_path",
]
