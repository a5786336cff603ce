"""Read-only projections shared by the operation tracker and the audit log."""

from __future__ import annotations

from datetime import datetime
from typing import Callable, Iterable, TypeVar

from vfs_optrack.domain.operations import (
    AuditLogEntry,
    Operation,
    OperationStatus,
    OperationType,
)
from vfs_optrack.utils.time import EPOCH, first_present

T = TypeVar("T", Operation, AuditLogEntry)
S = TypeVar("S")

ACTIVE_STATUSES = frozenset({OperationStatus.PENDING, OperationStatus.IN_PROGRESS})
HISTORY_STATUSES = frozenset({OperationStatus.COMPLETED, OperationStatus.FAILED})
TERMINAL_STATUSES = frozenset(
    {OperationStatus.COMPLETED, OperationStatus.FAILED, OperationStatus.CANCELED}
)


def completion_time(op: Operation) -> datetime | None:
    return first_present(op.completed_at, op.last_updated_at, op.created_at)


def creation_time(op: Operation) -> datetime | None:
    return first_present(op.created_at, op.last_updated_at)


def audit_entry_time(entry: AuditLogEntry) -> datetime | None:
    return first_present(entry.created_at, entry.completed_at)


def newest_first(items: Iterable[S], key: Callable[[S], datetime | None]) -> list[S]:
    """Sort descending by *key*; items without a timestamp go last."""

    def _sort_key(item: S) -> tuple[bool, datetime]:
        value = key(item)
        return (value is not None, value if value is not None else EPOCH)

    return sorted(items, key=_sort_key, reverse=True)


def filter_by_type(items: Iterable[T], operation_type: OperationType) -> list[T]:
    return [item for item in items if item.operation_type == operation_type]


def filter_by_status(items: Iterable[T], *statuses: OperationStatus) -> list[T]:
    wanted = frozenset(statuses)
    return [item for item in items if item.status in wanted]


def filter_by_user(items: Iterable[T], user_id: str) -> list[T]:
    return [item for item in items if item.user_id is not None and item.user_id == user_id]


def filter_by_organization(items: Iterable[T], organization_id: str) -> list[T]:
    return [
        item
        for item in items
        if item.organization_id is not None and item.organization_id == organization_id
    ]
