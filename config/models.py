"""Configuration dataclasses."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class PhotoPrismConfig:
    """PhotoPrism connection settings."""

    base_url: str = ""
    token_env: str = "PHOTOPRISM_TOKEN"
    token: str = ""
    request_timeout_seconds: float = 0.0
    label_priority: int = 0


@dataclass
class StorageConfig:
    """Local state settings."""

    state_path: str = "~/.photoprism-label-helper/state.json"
    history_limit: int = 50
    failure_limit: int = 20
    recent_labels_limit: int = 20
    suggestion_limit: int = 10


@dataclass
class LoggingConfig:
    """Console logging settings."""

    level: str = "INFO"
    debug_enabled: bool = False


@dataclass
class Config:
    """Top-level configuration container."""

    photoprism: PhotoPrismConfig
    storage: StorageConfig
    logging: LoggingConfig
