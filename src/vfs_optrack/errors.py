"""Failure types raised by the operation tracker and audit log."""

from __future__ import annotations

from pathlib import Path


class OperationTrackerError(Exception):
    """Base exception for tracker and audit failures."""

    pass


class OperationNotFoundError(OperationTrackerError, KeyError):
    """Raised when an operation id is not present in the live store."""

    def __init__(self, operation_id: str):
        self.operation_id = operation_id
        super().__init__(f"Operation not found: {operation_id}")

    def __str__(self) -> str:
        return str(self.args[0])


class PersistenceError(OperationTrackerError):
    """Raised when a state or audit file cannot be read, written or decoded."""

    def __init__(self, message: str, path: str | Path | None = None):
        self.path = str(path) if path is not None else None
        super().__init__(message if path is None else f"{message}: {path}")


class InvalidTransitionError(OperationTrackerError):
    """Raised when a transition is requested out of a terminal state."""

    def __init__(self, operation_id: str, status: str, requested: str):
        self.operation_id = operation_id
        self.status = status
        self.requested = requested
        super().__init__(
            f"Cannot apply '{requested}' to operation {operation_id}: "
            f"already in terminal state {status}"
        )
