"""Application context assembly."""

from __future__ import annotations

from dataclasses import dataclass

from vfs_optrack.audit.log import AuditLog
from vfs_optrack.config import Settings, load_settings
from vfs_optrack.logging_utils import configure_logging
from vfs_optrack.tracker import OperationTracker


@dataclass
class AppContext:
    """Owned handles to the tracker and audit log.

    Built once by the application's composition root and passed to the UI
    layer and transfer engines; nothing here is a process-wide global.
    """

    settings: Settings
    tracker: OperationTracker
    audit_log: AuditLog


def build_app_context(
    settings: Settings | None = None, *, setup_logging: bool = True
) -> AppContext:
    if settings is None:
        settings = load_settings()
    if setup_logging:
        configure_logging(settings.logging)

    tracker = OperationTracker(
        settings.operations_dir,
        settings.tracker.max_history,
        strict_transitions=settings.tracker.strict_transitions,
        evict_canceled=settings.tracker.evict_canceled,
    )
    audit_log = AuditLog(settings.audit_dir, settings.audit.max_entries)

    return AppContext(settings=settings, tracker=tracker, audit_log=audit_log)
