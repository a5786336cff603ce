"""Compacted audit log: a bounded, independently persisted audit view."""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path

from pydantic import ValidationError

from vfs_optrack.audit.legacy_import import import_legacy_trail, legacy_trail_path
from vfs_optrack.domain.operations import (
    AuditLogEntry,
    Operation,
    OperationStatus,
    OperationType,
)
from vfs_optrack.errors import PersistenceError
from vfs_optrack.queries import (
    audit_entry_time,
    filter_by_organization,
    filter_by_status,
    filter_by_type,
    filter_by_user,
    newest_first,
)
from vfs_optrack.utils.serialization import write_json_atomic

logger = logging.getLogger(__name__)

AUDIT_LOG_FILENAME = "audit_log.json"


class AuditLog:
    """Audit entries cached in memory and mirrored to ``audit_log.json``.

    The file is a JSON array rewritten on every change. When ``max_entries``
    is non-zero and exceeded, the oldest entries (by ``created_at``, falling
    back to ``completed_at``) are dropped. Survivors keep the order in which
    they were logged. If no array file exists yet, the tracker's legacy JSON
    Lines trail under ``operations/`` is imported once and written out.
    """

    def __init__(self, audit_dir: str | Path, max_entries: int = 0) -> None:
        if max_entries < 0:
            raise ValueError("max_entries must be non-negative")
        self._dir = Path(audit_dir)
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise PersistenceError("Failed to create audit log directory", self._dir) from exc

        self._path = self._dir / AUDIT_LOG_FILENAME
        self._max_entries = max_entries
        self._lock = threading.Lock()
        self._entries: list[AuditLogEntry] = []
        self._load()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> None:
        entries = self._read_snapshot()
        if entries is not None:
            self._entries = entries
            logger.info("Loaded %d audit log entries from JSON", len(entries))
            return

        legacy = legacy_trail_path(self._dir)
        imported = import_legacy_trail(legacy)
        if imported is None:
            return
        with self._lock:
            self._entries = imported
            self._save_locked()
        logger.info("Imported %d audit log entries from %s", len(self._entries), legacy)

    def _read_snapshot(self) -> list[AuditLogEntry] | None:
        if not self._path.exists():
            return None
        try:
            with self._path.open("r", encoding="utf-8") as handle:
                data = json.load(handle)
        except OSError as exc:
            raise PersistenceError("Failed to read audit log file", self._path) from exc
        except ValueError as exc:
            logger.warning("Audit log %s is not valid JSON, ignoring it: %s", self._path, exc)
            return None
        if not isinstance(data, list):
            logger.warning("Audit log %s is not a JSON array, ignoring it", self._path)
            return None

        entries: list[AuditLogEntry] = []
        for index, record in enumerate(data):
            try:
                entries.append(AuditLogEntry.model_validate(record))
            except ValidationError as exc:
                logger.warning("Skipping malformed audit entry #%d in %s: %s", index, self._path, exc)
        return entries

    def _save_locked(self) -> None:
        if self._max_entries and len(self._entries) > self._max_entries:
            ranked = newest_first(
                range(len(self._entries)),
                lambda index: audit_entry_time(self._entries[index]),
            )
            keep = sorted(ranked[: self._max_entries])
            self._entries = [self._entries[index] for index in keep]
        try:
            write_json_atomic(self._path, [entry.to_record() for entry in self._entries])
        except (OSError, TypeError, ValueError) as exc:
            raise PersistenceError("Failed to write audit log file", self._path) from exc

    def log_operation(self, operation: Operation) -> AuditLogEntry:
        entry = AuditLogEntry.from_operation(operation)
        with self._lock:
            self._entries.append(entry)
            self._save_locked()
        return entry

    def get_all_entries(self) -> list[AuditLogEntry]:
        with self._lock:
            return list(self._entries)

    def get_entries_by_user(self, user_id: str) -> list[AuditLogEntry]:
        return filter_by_user(self.get_all_entries(), user_id)

    def get_entries_by_organization(self, organization_id: str) -> list[AuditLogEntry]:
        return filter_by_organization(self.get_all_entries(), organization_id)

    def get_entries_by_type(self, operation_type: OperationType) -> list[AuditLogEntry]:
        return filter_by_type(self.get_all_entries(), operation_type)

    def get_entries_by_status(self, status: OperationStatus) -> list[AuditLogEntry]:
        return filter_by_status(self.get_all_entries(), status)

    def clear(self) -> None:
        with self._lock:
            self._entries = []
            self._save_locked()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
