from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from vfs_optrack.domain.operations import Operation, OperationType
from vfs_optrack.errors import PersistenceError
from vfs_optrack.persistence.snapshot import SnapshotStore
from vfs_optrack.utils.time import utc_now


def _operation(op_id: str) -> Operation:
    now = utc_now()
    return Operation(
        operation_id=op_id,
        operation_type=OperationType.DOWNLOAD,
        source_id="s1",
        source_path=f"/remote/{op_id}",
        created_at=now,
        last_updated_at=now,
    )


def test_load_missing_file_is_empty(tmp_path: Path) -> None:
    assert SnapshotStore(tmp_path).load() == {}


def test_save_then_load(tmp_path: Path) -> None:
    store = SnapshotStore(tmp_path)
    operations = {op_id: _operation(op_id) for op_id in ("a", "b")}

    store.save(operations)

    assert store.path == tmp_path / "operations.json"
    on_disk = json.loads(store.path.read_text(encoding="utf-8"))
    assert set(on_disk) == {"a", "b"}
    assert on_disk["a"]["operation_type"] == "Download"
    assert store.load() == operations


def test_malformed_record_is_skipped(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    store = SnapshotStore(tmp_path)
    good = _operation("good")
    store.path.write_text(
        json.dumps({"good": good.to_record(), "bad": {"operation_id": "bad"}}),
        encoding="utf-8",
    )

    with caplog.at_level(logging.WARNING, logger="vfs_optrack.persistence.snapshot"):
        loaded = store.load()

    assert loaded == {"good": good}
    assert "Skipping malformed operation bad" in caplog.text


def test_unparseable_document_raises(tmp_path: Path) -> None:
    store = SnapshotStore(tmp_path)
    store.path.write_text("{not json", encoding="utf-8")

    with pytest.raises(PersistenceError, match="Failed to read operations state file") as excinfo:
        store.load()

    assert excinfo.value.path == str(store.path)
    assert isinstance(excinfo.value.__cause__, ValueError)


def test_non_object_document_raises(tmp_path: Path) -> None:
    store = SnapshotStore(tmp_path)
    store.path.write_text("[]", encoding="utf-8")

    with pytest.raises(PersistenceError, match="not a JSON object"):
        store.load()


def test_write_failure_raises_persistence_error(tmp_path: Path) -> None:
    store = SnapshotStore(tmp_path / "missing-dir")

    with pytest.raises(PersistenceError, match="Failed to write operations state file") as excinfo:
        store.save({"a": _operation("a")})

    assert isinstance(excinfo.value.__cause__, OSError)
