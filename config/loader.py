"""Configuration loading and normalization."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

from config.merge import merge_sections
from config.models import Config, LoggingConfig, PhotoPrismConfig, StorageConfig


BASE_DIR = Path(__file__).resolve().parent.parent
MODULE_CONFIG_PATHS = {
    "photoprism": BASE_DIR / "photoprism" / "config.json",
    "storage": BASE_DIR / "core" / "storage_config.json",
}

_LOG_LEVELS = ("DEBUG", "INFO", "WARN", "ERROR")


def _as_str(value: Any, default: str) -> str:
    if value is None:
        return default
    return str(value)


def _as_bool(value: Any, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    return default


def _as_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _as_float(value: Any, default: float) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _as_limit(value: Any, default: int) -> int:
    limit = _as_int(value, default)
    return limit if limit > 0 else default


def _load_json(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def _load_default_sections() -> Dict[str, Any]:
    raw: Dict[str, Any] = {}
    for section, file_path in MODULE_CONFIG_PATHS.items():
        if file_path.exists():
            raw[section] = _load_json(file_path)
    return raw


def config_from_dict(raw: Dict[str, Any]) -> Config:
    """Build a Config instance from a raw dictionary."""
    photoprism_raw = raw.get("photoprism", {}) or {}
    storage_raw = raw.get("storage", {}) or {}
    logging_raw = raw.get("logging", {}) or {}

    photoprism = PhotoPrismConfig(
        base_url=_as_str(photoprism_raw.get("base_url"), "").strip(),
        token_env=_as_str(photoprism_raw.get("token_env"), "PHOTOPRISM_TOKEN"),
        token=_as_str(photoprism_raw.get("token"), ""),
        request_timeout_seconds=max(0.0, _as_float(photoprism_raw.get("request_timeout_seconds", 0.0), 0.0)),
        label_priority=_as_int(photoprism_raw.get("label_priority", 0), 0),
    )
    storage = StorageConfig(
        state_path=_as_str(storage_raw.get("state_path"), "~/.photoprism-label-helper/state.json"),
        history_limit=_as_limit(storage_raw.get("history_limit"), 50),
        failure_limit=_as_limit(storage_raw.get("failure_limit"), 20),
        recent_labels_limit=_as_limit(storage_raw.get("recent_labels_limit"), 20),
        suggestion_limit=_as_limit(storage_raw.get("suggestion_limit"), 10),
    )

    level = _as_str(logging_raw.get("level"), "INFO").upper()
    if level not in _LOG_LEVELS:
        level = "INFO"
    log_cfg = LoggingConfig(
        level=level,
        debug_enabled=_as_bool(logging_raw.get("debug_enabled"), False),
    )
    return Config(photoprism=photoprism, storage=storage, logging=log_cfg)


def load_config(path: Path | None) -> Config:
    """Load config data into a Config instance."""
    raw = _load_default_sections()
    if path is not None:
        raw = merge_sections(raw, _load_json(path))
    return config_from_dict(raw)
