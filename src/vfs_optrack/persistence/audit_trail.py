"""Append-only JSON Lines audit trail of operation events."""

from __future__ import annotations

import logging
import threading
from pathlib import Path

from pydantic import ValidationError

from vfs_optrack.domain.operations import Operation
from vfs_optrack.errors import PersistenceError
from vfs_optrack.queries import (
    creation_time,
    filter_by_organization,
    filter_by_user,
    newest_first,
)
from vfs_optrack.utils.serialization import dumps_line

logger = logging.getLogger(__name__)

AUDIT_TRAIL_FILENAME = "audit_log.jsonl"


def parse_trail_lines(data: bytes) -> tuple[list[Operation], list[tuple[int, str]]]:
    """Parse JSON Lines content into operations plus ``(lineno, reason)`` failures.

    Records are framed on ``\\n`` only and decoded one line at a time, so a
    path containing U+2028 or a line with invalid UTF-8 never affects its
    neighbours.
    """
    operations: list[Operation] = []
    failures: list[tuple[int, str]] = []
    for lineno, raw in enumerate(data.split(b"\n"), start=1):
        if not raw.strip():
            continue
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            failures.append((lineno, str(exc)))
            continue
        try:
            operations.append(Operation.model_validate_json(text))
        except ValidationError as exc:
            failures.append((lineno, str(exc)))
    return operations, failures


class AuditTrail:
    """One line per operation event; existing lines are never rewritten.

    ``append`` is fire-and-log: a failed write is reported through logging
    and never raised, so the audit trail cannot block an operation's
    lifecycle.
    """

    def __init__(self, state_dir: str | Path) -> None:
        self._path = Path(state_dir) / AUDIT_TRAIL_FILENAME
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def append(self, operation: Operation) -> bool:
        try:
            line = dumps_line(operation.to_record())
        except (TypeError, ValueError):
            logger.exception("Failed to encode operation %s for audit log", operation.operation_id)
            return False
        try:
            with self._lock, self._path.open("a", encoding="utf-8") as handle:
                handle.write(line + "\n")
        except OSError:
            logger.exception("Failed to write to audit log %s", self._path)
            return False
        return True

    def read_history(self, limit: int | None = None) -> list[Operation]:
        if not self._path.exists():
            return []
        try:
            data = self._path.read_bytes()
        except OSError as exc:
            raise PersistenceError("Failed to read audit log file", self._path) from exc

        operations, failures = parse_trail_lines(data)
        for lineno, reason in failures:
            logger.warning(
                "Failed to parse audit log line %d in %s: %s", lineno, self._path, reason
            )

        operations = newest_first(operations, creation_time)
        if limit is not None:
            operations = operations[:limit]
        return operations

    def filter_by_organization(
        self, organization_id: str, limit: int | None = None
    ) -> list[Operation]:
        return filter_by_organization(self.read_history(limit), organization_id)

    def filter_by_user(self, user_id: str, limit: int | None = None) -> list[Operation]:
        return filter_by_user(self.read_history(limit), user_id)
