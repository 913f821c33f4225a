"""Instance-scoped key/value persistence."""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Protocol
from urllib.parse import urlsplit

from core.errors import InstanceResolutionError, StateFileError


LABEL_CACHE_KEY = "labelCache"
RECENT_LABELS_KEY = "recentLabels"
ALL_LABELS_KEY = "allLabels"
EXECUTION_HISTORY_KEY = "executionHistory"
FAILED_OPERATIONS_KEY = "failedOperations"

_DEFAULT_PORTS = {"http": 80, "https": 443}

ALL_KEYS = (
    LABEL_CACHE_KEY,
    RECENT_LABELS_KEY,
    ALL_LABELS_KEY,
    EXECUTION_HISTORY_KEY,
    FAILED_OPERATIONS_KEY,
)


class StorageBackend(Protocol):
    """Flat key/value storage shared by every instance."""

    def read(self, key: str) -> Any:
        """Return the stored value or None."""

    def write(self, key: str, value: Any) -> None:
        """Persist a value under key."""

    def delete(self, keys: Iterable[str]) -> None:
        """Remove keys if present."""


class MemoryBackend:
    """In-process backend, mainly for tests."""

    def __init__(self) -> None:
        self.data: Dict[str, Any] = {}

    def read(self, key: str) -> Any:
        return json.loads(json.dumps(self.data[key])) if key in self.data else None

    def write(self, key: str, value: Any) -> None:
        self.data[key] = json.loads(json.dumps(value))

    def delete(self, keys: Iterable[str]) -> None:
        for key in keys:
            self.data.pop(key, None)


class JsonFileBackend:
    """Backend storing every key in a single JSON document.

    The document is re-read on every access and rewritten on every change.
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        text = self.path.read_text(encoding="utf-8")
        if not text.strip():
            return {}
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise StateFileError(f"State file {self.path} is not valid JSON: {exc}") from exc
        return data if isinstance(data, dict) else {}

    def _save(self, data: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        tmp_path.replace(self.path)

    def read(self, key: str) -> Any:
        return self._load().get(key)

    def write(self, key: str, value: Any) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def delete(self, keys: Iterable[str]) -> None:
        data = self._load()
        changed = False
        for key in keys:
            if key in data:
                del data[key]
                changed = True
        if changed:
            self._save(data)


def instance_id_from_url(url: str | None) -> str:
    """Derive the instance identifier (scheme://host) from a page URL.

    Host is lowercased; credentials and the scheme's default port are dropped.

    Args:
        url: Current page URL.

    Returns:
        Origin string such as ``https://photos.example.com``.
    """
    if not url:
        raise InstanceResolutionError("Could not determine current instance")
    parts = urlsplit(url.strip())
    scheme = parts.scheme.lower()
    host = parts.hostname
    if not scheme or not host:
        raise InstanceResolutionError("Invalid URL format")
    try:
        port = parts.port
    except ValueError as exc:
        raise InstanceResolutionError("Invalid URL format") from exc
    if ":" in host:
        host = f"[{host}]"
    if port is None or _DEFAULT_PORTS.get(scheme) == port:
        return f"{scheme}://{host}"
    return f"{scheme}://{host}:{port}"


def sanitize_instance_id(instance_id: str) -> str:
    return re.sub(r"[^a-zA-Z0-9]", "_", instance_id)


def create_instance_key(base_key: str, instance_id: str) -> str:
    """Build the composite storage key for an instance."""
    return f"{base_key}_{sanitize_instance_id(instance_id)}"


class InstanceStore:
    """Key/value store namespaced by the active PhotoPrism instance."""

    def __init__(self, backend: StorageBackend, origin_provider: Callable[[], str | None]) -> None:
        self.backend = backend
        self.origin_provider = origin_provider

    def instance_id(self) -> str:
        return instance_id_from_url(self.origin_provider())

    def _key(self, base_key: str) -> str:
        return create_instance_key(base_key, self.instance_id())

    def get(self, base_key: str, default: Any = None) -> Any:
        value = self.backend.read(self._key(base_key))
        if value is None:
            return default
        return value

    def set(self, base_key: str, value: Any) -> None:
        self.backend.write(self._key(base_key), value)

    def remove(self, base_keys: Iterable[str]) -> None:
        instance_id = self.instance_id()
        self.backend.delete([create_instance_key(key, instance_id) for key in base_keys])
