"""Configuration management for the operation tracker."""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

_config_logger = logging.getLogger(__name__)


class LoggingSettings(BaseModel):
    level: str = Field(default="INFO", description="Python logging level name")
    file: str | None = Field(default=None, description="Optional log file path")


class TrackerSettings(BaseModel):
    state_dir: str = Field(default="./data")
    max_history: int = Field(
        default=100,
        ge=1,
        le=100_000,
        description="Completed/failed operations kept in the live store.",
    )
    strict_transitions: bool = Field(
        default=True,
        description=(
            "If True, progress and terminal calls on an operation that already "
            "reached a terminal state are rejected."
        ),
    )
    evict_canceled: bool = Field(
        default=False,
        description="If True, canceled operations count toward max_history eviction.",
    )

    @field_validator("state_dir")
    @classmethod
    def _validate_state_dir(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("state_dir must not be empty")
        return value


class AuditSettings(BaseModel):
    max_entries: int = Field(
        default=10_000,
        ge=0,
        description="Entries kept in the compacted audit log (0 = unlimited).",
    )


class Settings(BaseModel):
    tracker: TrackerSettings = Field(default_factory=TrackerSettings)
    audit: AuditSettings = Field(default_factory=AuditSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @property
    def operations_dir(self) -> Path:
        return Path(self.tracker.state_dir) / "operations"

    @property
    def audit_dir(self) -> Path:
        return Path(self.tracker.state_dir)


ENV_KEYS = {
    "state_dir": "OPTRACK_STATE_DIR",
    "max_history": "OPTRACK_MAX_HISTORY",
    "strict_transitions": "OPTRACK_STRICT_TRANSITIONS",
    "evict_canceled": "OPTRACK_EVICT_CANCELED",
    "audit_max_entries": "AUDIT_MAX_ENTRIES",
    "log_level": "LOG_LEVEL",
    "log_file": "LOG_FILE",
}

_TRUE_VALUES = frozenset({"1", "true", "yes"})


def _project_root() -> Path:
    return Path(__file__).resolve().parents[2]


def _resolve_path(path: str) -> str:
    candidate = Path(path).expanduser()
    if candidate.is_absolute():
        return str(candidate.resolve())
    return str((_project_root() / candidate).resolve())


def _env_bool(key: str, default: bool) -> bool:
    value = os.getenv(key)
    if value is None:
        return default
    return value.strip().lower() in _TRUE_VALUES


def _env_int(key: str, default: int) -> int:
    value = os.getenv(key)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        _config_logger.warning(
            "Invalid integer value for %s: %r, using default %d", key, value, default
        )
        return default


def load_settings() -> Settings:
    """Load configuration and cache the result."""

    return _load_settings_cached()


@lru_cache(maxsize=1)
def _load_settings_cached() -> Settings:
    load_dotenv(dotenv_path=_project_root() / ".env")
    log_file_env = os.getenv(ENV_KEYS["log_file"])

    settings_data: dict[str, object] = {
        "tracker": {
            "state_dir": _resolve_path(
                os.getenv(ENV_KEYS["state_dir"], "").strip() or TrackerSettings().state_dir
            ),
            "max_history": _env_int(ENV_KEYS["max_history"], TrackerSettings().max_history),
            "strict_transitions": _env_bool(
                ENV_KEYS["strict_transitions"], TrackerSettings().strict_transitions
            ),
            "evict_canceled": _env_bool(
                ENV_KEYS["evict_canceled"], TrackerSettings().evict_canceled
            ),
        },
        "audit": {
            "max_entries": _env_int(ENV_KEYS["audit_max_entries"], AuditSettings().max_entries),
        },
        "logging": {
            "level": os.getenv(ENV_KEYS["log_level"], LoggingSettings().level),
            "file": _resolve_path(log_file_env) if log_file_env else None,
        },
    }

    try:
        settings = Settings.model_validate(settings_data)
    except ValidationError as exc:
        raise RuntimeError(f"Invalid configuration: {exc}") from exc

    return settings
