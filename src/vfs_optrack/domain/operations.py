"""Domain objects for tracked file operations."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from vfs_optrack.utils.time import ensure_utc


class OperationType(str, Enum):
    UPLOAD = "Upload"
    DOWNLOAD = "Download"
    DELETE = "Delete"
    MOVE = "Move"
    COPY = "Copy"


class OperationStatus(str, Enum):
    PENDING = "Pending"
    IN_PROGRESS = "InProgress"
    COMPLETED = "Completed"
    FAILED = "Failed"
    CANCELED = "Canceled"

    @property
    def is_terminal(self) -> bool:
        return self in (
            OperationStatus.COMPLETED,
            OperationStatus.FAILED,
            OperationStatus.CANCELED,
        )


class Operation(BaseModel):
    """A tracked transfer, delete, move or copy and its lifecycle state.

    Timestamps are stored as UTC. On disk they are ISO-8601 strings; integer
    epoch seconds are also accepted when reading older files.
    """

    operation_id: str
    operation_type: OperationType
    source_id: str
    source_path: str
    destination_path: str | None = None
    file_size: int | None = Field(default=None, ge=0)
    bytes_processed: int = Field(default=0, ge=0)
    status: OperationStatus = OperationStatus.PENDING
    error: str | None = None
    user_id: str | None = None
    organization_id: str | None = None
    created_at: datetime | None = None
    completed_at: datetime | None = None
    last_updated_at: datetime | None = None

    @field_validator("created_at", "completed_at", "last_updated_at")
    @classmethod
    def _normalize_timestamp(cls, value: datetime | None) -> datetime | None:
        if value is None:
            return None
        return ensure_utc(value)

    def to_record(self) -> dict[str, object]:
        return self.model_dump(mode="json")


class AuditLogEntry(BaseModel):
    """Immutable audit view of an operation, without progress counters."""

    model_config = ConfigDict(frozen=True)

    operation_id: str
    operation_type: OperationType
    source_id: str
    source_path: str
    destination_path: str | None = None
    file_size: int | None = None
    status: OperationStatus
    error: str | None = None
    user_id: str | None = None
    organization_id: str | None = None
    created_at: datetime | None = None
    completed_at: datetime | None = None

    @field_validator("created_at", "completed_at")
    @classmethod
    def _normalize_timestamp(cls, value: datetime | None) -> datetime | None:
        if value is None:
            return None
        return ensure_utc(value)

    @classmethod
    def from_operation(cls, operation: Operation) -> "AuditLogEntry":
        return cls(
            operation_id=operation.operation_id,
            operation_type=operation.operation_type,
            source_id=operation.source_id,
            source_path=operation.source_path,
            destination_path=operation.destination_path,
            file_size=operation.file_size,
            status=operation.status,
            error=operation.error,
            user_id=operation.user_id,
            organization_id=operation.organization_id,
            created_at=operation.created_at,
            completed_at=operation.completed_at,
        )

    def to_record(self) -> dict[str, object]:
        return self.model_dump(mode="json")
