"""Whole-state JSON snapshot of the live operation map."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Mapping

from pydantic import ValidationError

from vfs_optrack.domain.operations import Operation
from vfs_optrack.errors import PersistenceError
from vfs_optrack.utils.serialization import write_json_atomic

logger = logging.getLogger(__name__)

SNAPSHOT_FILENAME = "operations.json"


class SnapshotStore:
    """Reads and rewrites ``operations.json`` (operation_id -> record)."""

    def __init__(self, state_dir: str | Path) -> None:
        self._path = Path(state_dir) / SNAPSHOT_FILENAME

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> dict[str, Operation]:
        if not self._path.exists():
            return {}
        try:
            with self._path.open("r", encoding="utf-8") as handle:
                data = json.load(handle)
        except (OSError, ValueError) as exc:
            raise PersistenceError("Failed to read operations state file", self._path) from exc

        if not isinstance(data, dict):
            raise PersistenceError(
                "Operations state file is not a JSON object", self._path
            )

        operations: dict[str, Operation] = {}
        for key, record in data.items():
            try:
                operation = Operation.model_validate(record)
            except ValidationError as exc:
                logger.warning("Skipping malformed operation %s in %s: %s", key, self._path, exc)
                continue
            operations[operation.operation_id] = operation
        return operations

    def save(self, operations: Mapping[str, Operation]) -> None:
        payload = {op_id: op.to_record() for op_id, op in operations.items()}
        try:
            write_json_atomic(self._path, payload)
        except (OSError, TypeError, ValueError) as exc:
            raise PersistenceError("Failed to write operations state file", self._path) from exc
