"""Label name to label ID resolution with a per-instance cache."""

from __future__ import annotations

from typing import Any, Callable, Dict

from core.errors import LabelNotFoundError, ResolutionTransportError, TransportError
from core.store import LABEL_CACHE_KEY, InstanceStore
from logger import get_logger

log = get_logger()

DetailsFetcher = Callable[[str, str], Dict[str, Any]]


def cache_key(label_name: str) -> str:
    return label_name.strip().lower()


def find_label_id(labels: list[Dict[str, Any]], label_name: str) -> int | None:
    """Find a label whose name or slug matches case-insensitively."""
    wanted = label_name.strip().lower()
    for label in labels:
        if str(label.get("name", "")).lower() == wanted or str(label.get("slug", "")).lower() == wanted:
            return int(label["id"])
    return None


class LabelResolver:
    """Resolve label IDs, needed only for removal."""

    def __init__(
        self,
        store: InstanceStore,
        fetch_details: DetailsFetcher,
        extract_labels: Callable[[Dict[str, Any]], list[Dict[str, Any]]],
    ) -> None:
        self.store = store
        self.fetch_details = fetch_details
        self.extract_labels = extract_labels

    def cached_label_ids(self) -> Dict[str, int]:
        return dict(self.store.get(LABEL_CACHE_KEY, {}))

    def resolve_label_id(self, label_name: str, sample_uid: str, token: str) -> int:
        """Return the numeric ID for a label name.

        Args:
            label_name: Label to resolve.
            sample_uid: Photo expected to carry the label.
            token: Session token.

        Returns:
            Label ID.

        Raises:
            LabelNotFoundError: The sample photo does not carry the label.
            ResolutionTransportError: The detail request failed.
        """
        key = cache_key(label_name)
        label_cache = self.store.get(LABEL_CACHE_KEY, {})
        if key in label_cache:
            log.debug(f"Label cache hit: {label_name} -> {label_cache[key]}")
            return int(label_cache[key])

        log.debug(f"Label cache miss for '{label_name}', fetching photo {sample_uid}")
        try:
            details = self.fetch_details(sample_uid, token)
        except TransportError as exc:
            raise ResolutionTransportError(f"Failed to get label ID: {exc}") from exc

        label_id = find_label_id(self.extract_labels(details), label_name)
        if label_id is None:
            raise LabelNotFoundError(
                f'Failed to get label ID: Label "{label_name}" not found on the photo, cannot determine its ID.'
            )

        label_cache = self.store.get(LABEL_CACHE_KEY, {})
        label_cache[key] = label_id
        self.store.set(LABEL_CACHE_KEY, label_cache)
        return label_id

    def clear(self) -> None:
        self.store.remove([LABEL_CACHE_KEY])
