"""JSON serialization utilities."""

from __future__ import annotations

import datetime
import enum
import json
import os
import tempfile
from pathlib import Path

from pydantic import BaseModel


def json_default(obj: object) -> object:
    """JSON serializer for objects not serializable by default json code."""
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json")
    if isinstance(obj, (datetime.date, datetime.datetime)):
        return obj.isoformat()
    if isinstance(obj, enum.Enum):
        return obj.value
    if isinstance(obj, Path):
        return str(obj)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def dumps_line(payload: object) -> str:
    """Encode *payload* as a single compact JSON line (no trailing newline)."""
    return json.dumps(payload, ensure_ascii=False, separators=(",", ":"), default=json_default)


def write_json_atomic(path: Path, payload: object) -> None:
    """Replace *path* with pretty-printed JSON without exposing a partial file.

    The document is written to a temporary file in the target directory and
    renamed over the target, so a crash mid-write leaves the previous version
    intact.
    """
    data = json.dumps(payload, ensure_ascii=False, indent=2, default=json_default)
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent)
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise
