from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from vfs_optrack import config


def test_defaults_without_environment() -> None:
    settings = config.load_settings()

    assert settings.tracker.max_history == 100
    assert settings.tracker.strict_transitions is True
    assert settings.tracker.evict_canceled is False
    assert settings.audit.max_entries == 10_000
    assert settings.logging.level == "INFO"
    assert settings.logging.file is None
    assert Path(settings.tracker.state_dir) == (config._project_root() / "data").resolve()


def test_load_settings_is_cached() -> None:
    assert config.load_settings() is config.load_settings()


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("OPTRACK_STATE_DIR", str(tmp_path / "state"))
    monkeypatch.setenv("OPTRACK_MAX_HISTORY", "7")
    monkeypatch.setenv("OPTRACK_STRICT_TRANSITIONS", "false")
    monkeypatch.setenv("OPTRACK_EVICT_CANCELED", "yes")
    monkeypatch.setenv("AUDIT_MAX_ENTRIES", "0")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")

    settings = config.load_settings()

    assert settings.tracker.state_dir == str((tmp_path / "state").resolve())
    assert settings.tracker.max_history == 7
    assert settings.tracker.strict_transitions is False
    assert settings.tracker.evict_canceled is True
    assert settings.audit.max_entries == 0
    assert settings.logging.level == "DEBUG"
    assert settings.operations_dir == tmp_path.resolve() / "state" / "operations"
    assert settings.audit_dir == tmp_path.resolve() / "state"


def test_blank_state_dir_uses_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("OPTRACK_STATE_DIR", "   ")
    settings = config.load_settings()
    assert settings.tracker.state_dir.endswith("data")


def test_resolve_path_expands_home(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("HOME", str(tmp_path))
    assert config._resolve_path("~/optrack") == str((tmp_path / "optrack").resolve())


def test_resolve_path_relative_is_anchored_to_project_root() -> None:
    resolved = config._resolve_path("data/state")
    assert resolved == str((config._project_root() / "data" / "state").resolve())


def test_env_int_uses_default_for_blank(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TEST_INT_VALUE", "")
    assert config._env_int("TEST_INT_VALUE", 7) == 7


def test_env_int_invalid_value_returns_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TEST_INT_INVALID", "not_a_number")
    assert config._env_int("TEST_INT_INVALID", 42) == 42


def test_env_bool_variants(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TEST_BOOL", " TRUE ")
    assert config._env_bool("TEST_BOOL", False) is True
    monkeypatch.setenv("TEST_BOOL", "off")
    assert config._env_bool("TEST_BOOL", True) is False
    monkeypatch.delenv("TEST_BOOL")
    assert config._env_bool("TEST_BOOL", True) is True


def test_load_settings_raises_runtime_error_on_validation(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    # max_history has a minimum of 1.
    monkeypatch.setenv("OPTRACK_MAX_HISTORY", "0")

    with pytest.raises(RuntimeError, match="Invalid configuration"):
        config.load_settings()


def test_negative_audit_max_entries_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("AUDIT_MAX_ENTRIES", "-1")

    with pytest.raises(RuntimeError, match="Invalid configuration"):
        config.load_settings()


def test_tracker_settings_reject_blank_state_dir() -> None:
    with pytest.raises(ValidationError):
        config.TrackerSettings(state_dir="  ")
