"""Centralized application configuration with schema validation.

This module is intentionally compatibility-first:
- Supports flat environment names (for example ``TXMERGE_OUTPUT``).
- Supports nested names (for example ``MERGE__OUTPUT_FILE``).
- Optionally reads a local ``.env`` file before process env values.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from threading import Lock

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

DEFAULT_TX_LOGS_FILE = "txLogs.json"
DEFAULT_TX_HASHES_FILE = "tx-hashes.txt"
DEFAULT_OUTPUT_FILE = "txLogsWithRealHashes.json"
DEFAULT_MARKER = "Transaction sent:"
DEFAULT_HASH_FIELD = "txHash"


class MergeConfig(BaseModel):
    """Input/output locations and correlation settings for a merge run."""

    model_config = ConfigDict(frozen=True)

    base_dir: str = Field(default=".")
    tx_logs_file: str = Field(default=DEFAULT_TX_LOGS_FILE)
    tx_hashes_file: str = Field(default=DEFAULT_TX_HASHES_FILE)
    output_file: str = Field(default=DEFAULT_OUTPUT_FILE)
    marker: str = Field(default=DEFAULT_MARKER, description="Substring identifying hash lines")
    hash_field: str = Field(default=DEFAULT_HASH_FIELD, description="Field added to each record")

    @field_validator("base_dir", "tx_logs_file", "tx_hashes_file", "output_file", mode="before")
    @classmethod
    def _normalize_path_text(cls, value: object) -> str:
        text = str(value or "").strip()
        if not text:
            raise ValueError("path settings must be non-empty")
        return text

    @field_validator("marker", mode="before")
    @classmethod
    def _require_marker(cls, value: object) -> str:
        # Surrounding whitespace is significant for a substring match.
        text = "" if value is None else str(value)
        if not text.strip():
            raise ValueError("merge.marker must be a non-empty string")
        return text

    @field_validator("hash_field", mode="before")
    @classmethod
    def _require_hash_field(cls, value: object) -> str:
        text = str(value or "").strip()
        if not text:
            raise ValueError("merge.hash_field must be a non-empty string")
        return text


class LoggingSettings(BaseModel):
    """Repository-wide logging settings."""

    model_config = ConfigDict(frozen=True)

    level: str = Field(default="INFO")
    json_logs: bool = Field(default=False)
    override_root_handlers: bool = Field(default=False)

    @field_validator("level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        text = str(value or "").strip().upper()
        if text in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            return text
        return "INFO"


class Settings(BaseModel):
    """Top-level settings model."""

    model_config = ConfigDict(frozen=True)

    merge: MergeConfig = Field(default_factory=MergeConfig)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @classmethod
    def from_env(
        cls,
        *,
        env: Mapping[str, str] | None = None,
        env_file: str = ".env",
    ) -> Settings:
        """Build settings from `.env` then environment variables."""
        runtime_env = os.environ if env is None else env
        merged_env = _merge_env(_load_dotenv(Path(env_file)), runtime_env)
        payload = _build_payload(merged_env)
        return cls.model_validate(payload)


def _load_dotenv(path: Path) -> dict[str, str]:
    """Parse a minimal `.env` file format."""
    if not path.exists() or not path.is_file():
        return {}

    values: dict[str, str] = {}
    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, raw_value = line.split("=", 1)
        key_clean = key.strip()
        value = raw_value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in {"'", '"'}:
            value = value[1:-1]
        if key_clean:
            values[key_clean] = value
    return values


def _merge_env(dotenv_values: Mapping[str, str], runtime_env: Mapping[str, str]) -> dict[str, str]:
    """Return env map where process env overrides `.env` values."""
    merged = {str(k): str(v) for k, v in dotenv_values.items()}
    for key, value in runtime_env.items():
        merged[str(key)] = str(value)
    return merged


def _first_non_empty(env: Mapping[str, str], *keys: str) -> str | None:
    """Return the first non-empty value for the provided keys."""
    for key in keys:
        value = str(env.get(key, "")).strip()
        if value:
            return value
    return None


def _first_raw(env: Mapping[str, str], *keys: str) -> str | None:
    """Like :func:`_first_non_empty` but keeps surrounding whitespace."""
    for key in keys:
        value = str(env.get(key, ""))
        if value.strip():
            return value
    return None


def _build_payload(env: Mapping[str, str]) -> dict[str, object]:
    """Build nested settings payload from env values."""
    merge = {
        "base_dir": _first_non_empty(env, "MERGE__BASE_DIR", "TXMERGE_BASE_DIR"),
        "tx_logs_file": _first_non_empty(env, "MERGE__TX_LOGS_FILE", "TXMERGE_TX_LOGS"),
        "tx_hashes_file": _first_non_empty(env, "MERGE__TX_HASHES_FILE", "TXMERGE_TX_HASHES"),
        "output_file": _first_non_empty(env, "MERGE__OUTPUT_FILE", "TXMERGE_OUTPUT"),
        "marker": _first_raw(env, "MERGE__MARKER", "TXMERGE_MARKER"),
        "hash_field": _first_non_empty(env, "MERGE__HASH_FIELD", "TXMERGE_HASH_FIELD"),
    }
    logging_settings = {
        "level": _first_non_empty(env, "LOGGING__LEVEL", "TXMERGE_LOG_LEVEL"),
        "json_logs": _first_non_empty(env, "LOGGING__JSON_LOGS", "TXMERGE_LOG_JSON"),
        "override_root_handlers": _first_non_empty(
            env, "LOGGING__OVERRIDE_ROOT_HANDLERS", "TXMERGE_LOG_OVERRIDE"
        ),
    }
    return {
        "merge": {k: v for k, v in merge.items() if v is not None},
        "logging": {k: v for k, v in logging_settings.items() if v is not None},
    }


_SETTINGS_LOCK = Lock()
_SETTINGS_CACHE: Settings | None = None


def get_settings(*, reload: bool = False) -> Settings:
    """Return cached settings, optionally forcing reload from env."""
    global _SETTINGS_CACHE
    with _SETTINGS_LOCK:
        if reload or _SETTINGS_CACHE is None:
            _SETTINGS_CACHE = Settings.from_env()
        return _SETTINGS_CACHE


def clear_settings_cache() -> None:
    """Clear in-process settings cache."""
    global _SETTINGS_CACHE
    with _SETTINGS_LOCK:
        _SETTINGS_CACHE = None


__all__ = [
    "DEFAULT_HASH_FIELD",
    "DEFAULT_MARKER",
    "DEFAULT_OUTPUT_FILE",
    "DEFAULT_TX_HASHES_FILE",
    "DEFAULT_TX_LOGS_FILE",
    "LoggingSettings",
    "MergeConfig",
    "Settings",
    "get_settings",
    "clear_settings_cache",
    "ValidationError",
]
