"""One-time import of the tracker's append-only trail into audit entries."""

from __future__ import annotations

import logging
from pathlib import Path

from vfs_optrack.domain.operations import AuditLogEntry
from vfs_optrack.errors import PersistenceError
from vfs_optrack.persistence.audit_trail import AUDIT_TRAIL_FILENAME, parse_trail_lines

logger = logging.getLogger(__name__)

LEGACY_SUBDIR = "operations"


def legacy_trail_path(audit_dir: str | Path) -> Path:
    return Path(audit_dir) / LEGACY_SUBDIR / AUDIT_TRAIL_FILENAME


def import_legacy_trail(path: str | Path) -> list[AuditLogEntry] | None:
    """Project every parseable line of a JSON Lines trail to an audit entry.

    Returns None when *path* does not exist. Lines that fail to parse are
    skipped.
    """
    trail = Path(path)
    if not trail.exists():
        return None
    try:
        data = trail.read_bytes()
    except OSError as exc:
        raise PersistenceError("Failed to read legacy audit log file", trail) from exc

    operations, failures = parse_trail_lines(data)
    if failures:
        logger.warning(
            "Skipped %d unparseable lines while importing %s", len(failures), trail
        )
    return [AuditLogEntry.from_operation(operation) for operation in operations]
