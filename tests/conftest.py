from __future__ import annotations

import os
from pathlib import Path

import pytest

from vfs_optrack import config
from vfs_optrack.tracker import OperationTracker

_ENV_KEYS = tuple(config.ENV_KEYS.values())


def pytest_sessionstart(session: pytest.Session) -> None:
    # Keep unit runs away from any developer state directory.
    for key in _ENV_KEYS:
        os.environ.pop(key, None)


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config, "load_dotenv", lambda **_: None)
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    config._load_settings_cached.cache_clear()
    yield
    config._load_settings_cached.cache_clear()


@pytest.fixture
def state_dir(tmp_path: Path) -> Path:
    return tmp_path / "operations"


@pytest.fixture
def tracker(state_dir: Path) -> OperationTracker:
    return OperationTracker(state_dir, max_history=5)
