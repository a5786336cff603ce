"""Operation tracker: the authoritative live map of file operations.

Every mutation updates the in-memory map under ``_lock`` and then, with the
lock released, persists the snapshot and appends to the audit trail on the
calling thread. Snapshot failures surface as :class:`PersistenceError`
except during ``create``, where they are logged. Audit-trail failures are
always logged and never raised.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Callable
from uuid import uuid4

from vfs_optrack.domain.operations import Operation, OperationStatus, OperationType
from vfs_optrack.errors import InvalidTransitionError, OperationNotFoundError, PersistenceError
from vfs_optrack.persistence.audit_trail import AuditTrail
from vfs_optrack.persistence.snapshot import SnapshotStore
from vfs_optrack.queries import (
    ACTIVE_STATUSES,
    HISTORY_STATUSES,
    TERMINAL_STATUSES,
    completion_time,
    creation_time,
    filter_by_organization,
    filter_by_status,
    filter_by_type,
    filter_by_user,
    newest_first,
)
from vfs_optrack.utils.time import utc_now

logger = logging.getLogger(__name__)


class OperationTracker:
    def __init__(
        self,
        state_dir: str | Path,
        max_history: int,
        *,
        strict_transitions: bool = True,
        evict_canceled: bool = False,
    ) -> None:
        if max_history < 1:
            raise ValueError("max_history must be at least 1")
        self._state_dir = Path(state_dir)
        try:
            self._state_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise PersistenceError(
                "Failed to create operation tracker state directory", self._state_dir
            ) from exc

        self._max_history = max_history
        self._strict = strict_transitions
        self._evictable = TERMINAL_STATUSES if evict_canceled else HISTORY_STATUSES
        self._snapshot = SnapshotStore(self._state_dir)
        self._audit = AuditTrail(self._state_dir)
        self._lock = threading.Lock()
        self._persist_lock = threading.Lock()
        self._operations: dict[str, Operation] = self._snapshot.load()
        logger.info("Loaded %d operations from state file", len(self._operations))

    @property
    def max_history(self) -> int:
        return self._max_history

    @property
    def audit_trail(self) -> AuditTrail:
        return self._audit

    # -- mutations -----------------------------------------------------------

    def create(
        self,
        operation_type: OperationType,
        source_id: str,
        source_path: str,
        destination_path: str | None = None,
        file_size: int | None = None,
        user_id: str | None = None,
        organization_id: str | None = None,
    ) -> str:
        operation_id = str(uuid4())
        now = utc_now()
        operation = Operation(
            operation_id=operation_id,
            operation_type=operation_type,
            source_id=source_id,
            source_path=source_path,
            destination_path=destination_path,
            file_size=file_size,
            user_id=user_id,
            organization_id=organization_id,
            created_at=now,
            last_updated_at=now,
        )
        with self._lock:
            self._operations[operation_id] = operation
            record = operation.model_copy()

        self._audit.append(record)
        try:
            self._persist()
        except PersistenceError:
            logger.exception("Failed to save operation state after creating %s", operation_id)

        logger.info("Created operation: %s", operation_id)
        return operation_id

    def update_progress(self, operation_id: str, bytes_processed: int) -> None:
        if bytes_processed < 0:
            raise ValueError("bytes_processed must be non-negative")

        def _apply(op: Operation) -> None:
            op.bytes_processed = bytes_processed
            op.status = OperationStatus.IN_PROGRESS
            op.last_updated_at = utc_now()

        self._mutate(operation_id, "update_progress", _apply)
        self._persist()

    def complete(self, operation_id: str) -> None:
        def _apply(op: Operation) -> None:
            now = utc_now()
            op.status = OperationStatus.COMPLETED
            op.completed_at = now
            op.last_updated_at = now
            if op.file_size is None:
                op.file_size = op.bytes_processed

        self._finish(operation_id, "complete", _apply)

    def fail(self, operation_id: str, message: str) -> None:
        def _apply(op: Operation) -> None:
            now = utc_now()
            op.status = OperationStatus.FAILED
            op.error = message
            op.completed_at = now
            op.last_updated_at = now

        self._finish(operation_id, "fail", _apply)

    def cancel(self, operation_id: str) -> None:
        def _apply(op: Operation) -> None:
            now = utc_now()
            op.status = OperationStatus.CANCELED
            op.completed_at = now
            op.last_updated_at = now

        self._finish(operation_id, "cancel", _apply)

    def _mutate(
        self,
        operation_id: str,
        action: str,
        apply: Callable[[Operation], None],
    ) -> Operation | None:
        """Apply *apply* to a live operation and return a copy of the result.

        Unknown ids return None without error: progress reporters may race
        with whoever owns the lifecycle and evicts the record.
        """
        with self._lock:
            op = self._operations.get(operation_id)
            if op is None:
                logger.debug("Ignoring %s for unknown operation %s", action, operation_id)
                return None
            if self._strict and op.status.is_terminal:
                raise InvalidTransitionError(operation_id, op.status.value, action)
            apply(op)
            return op.model_copy()

    def _finish(
        self,
        operation_id: str,
        action: str,
        apply: Callable[[Operation], None],
    ) -> None:
        record = self._mutate(operation_id, action, apply)
        if record is None:
            return
        self._audit.append(record)
        self._evict_old_history()
        self._persist()

    def _evict_old_history(self) -> None:
        with self._lock:
            finished = newest_first(
                (
                    op
                    for op in self._operations.values()
                    if op.status in self._evictable and completion_time(op) is not None
                ),
                completion_time,
            )
            for op in finished[self._max_history :]:
                del self._operations[op.operation_id]
        evicted = max(0, len(finished) - self._max_history)
        if evicted:
            logger.debug("Evicted %d operations beyond max_history=%d", evicted, self._max_history)

    def _persist(self) -> None:
        # Serialized writes that snapshot the map at write time, so the last
        # file written always carries the latest state.
        with self._persist_lock:
            with self._lock:
                snapshot = {op_id: op.model_copy() for op_id, op in self._operations.items()}
            self._snapshot.save(snapshot)

    # -- queries -------------------------------------------------------------

    def get(self, operation_id: str) -> Operation:
        with self._lock:
            op = self._operations.get(operation_id)
            if op is None:
                raise OperationNotFoundError(operation_id)
            return op.model_copy()

    def _copy_all(self) -> list[Operation]:
        with self._lock:
            return [op.model_copy() for op in self._operations.values()]

    def get_all(self) -> list[Operation]:
        return self._copy_all()

    def get_by_type(self, operation_type: OperationType) -> list[Operation]:
        return filter_by_type(self._copy_all(), operation_type)

    def get_by_status(self, status: OperationStatus) -> list[Operation]:
        return filter_by_status(self._copy_all(), status)

    def get_active(self) -> list[Operation]:
        return filter_by_status(self._copy_all(), *ACTIVE_STATUSES)

    def get_completed(self) -> list[Operation]:
        finished = filter_by_status(self._copy_all(), *HISTORY_STATUSES)
        return newest_first(finished, completion_time)[: self._max_history]

    def get_by_user(self, user_id: str) -> list[Operation]:
        return newest_first(filter_by_user(self._copy_all(), user_id), creation_time)

    def get_by_organization(self, organization_id: str) -> list[Operation]:
        return newest_first(
            filter_by_organization(self._copy_all(), organization_id), creation_time
        )

    # -- audit history -------------------------------------------------------

    def get_audit_history(self, limit: int | None = None) -> list[Operation]:
        return self._audit.read_history(limit)

    def get_organization_audit(
        self, organization_id: str, limit: int | None = None
    ) -> list[Operation]:
        return self._audit.filter_by_organization(organization_id, limit)

    def get_user_audit(self, user_id: str, limit: int | None = None) -> list[Operation]:
        return self._audit.filter_by_user(user_id, limit)

    def __len__(self) -> int:
        with self._lock:
            return len(self._operations)
