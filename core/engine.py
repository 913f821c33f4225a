"""Batch label engine: add/remove a label across selected photos."""

from __future__ import annotations

import time
from datetime import datetime
from typing import List

import requests
from requests.adapters import HTTPAdapter

from config import Config
from core.batch import BatchResult, ProgressCallback, run_batch
from core.errors import EmptyLabelError, NoItemsSelectedError
from core.failures import FailureGroup, FailureTracker
from core.history import ExecutionRecord, ExecutionRecorder
from core.label_resolver import LabelResolver
from core.labels import LabelSuggestions
from core.selection import SelectionSource
from core.store import ALL_KEYS, InstanceStore
from logger import get_logger
from photoprism.client import add_photo_label, photo_details, photo_labels, remove_photo_label

log = get_logger()

ACTIONS = ("add", "remove")
DEFAULT_POOL_SIZE = 10


class LabelEngine:
    """Runs label batches and keeps per-instance history, failures and caches."""

    def __init__(self, store: InstanceStore, cfg: Config, session: requests.Session | None = None) -> None:
        self.store = store
        self.cfg = cfg
        self.session = session or requests.Session()
        self._pool_size = DEFAULT_POOL_SIZE
        self.recorder = ExecutionRecorder(store, cfg.storage.history_limit)
        self.failures = FailureTracker(store, cfg.storage.failure_limit)
        self.suggestions = LabelSuggestions(store, cfg.storage.recent_labels_limit)
        self.resolver = LabelResolver(store, self._fetch_details, photo_labels)

    @property
    def _timeout(self) -> float:
        return self.cfg.photoprism.request_timeout_seconds

    def _fetch_details(self, uid: str, token: str) -> dict:
        return photo_details(self.session, self.store.instance_id(), uid, token, timeout_seconds=self._timeout)

    def _ensure_pool_size(self, size: int) -> None:
        # One connection per in-flight request; urllib3 discards extras above maxsize.
        if size <= self._pool_size or not isinstance(self.session, requests.Session):
            return
        adapter = HTTPAdapter(pool_maxsize=size)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)
        self._pool_size = size
        log.debug(f"Connection pool resized to {size}")

    def _dispatch(
        self,
        action: str,
        label_name: str,
        uids: List[str],
        token: str,
        progress: ProgressCallback | None,
    ) -> BatchResult:
        if not uids:
            return BatchResult()
        base_url = self.store.instance_id()
        self._ensure_pool_size(len(uids))
        if action == "add":
            priority = self.cfg.photoprism.label_priority
            return run_batch(
                uids,
                lambda uid: add_photo_label(
                    self.session, base_url, uid, label_name, token, priority=priority, timeout_seconds=self._timeout
                ),
                progress,
            )
        label_id = self.resolver.resolve_label_id(label_name, uids[0], token)
        return run_batch(
            uids,
            lambda uid: remove_photo_label(self.session, base_url, uid, label_id, token, timeout_seconds=self._timeout),
            progress,
        )

    def run_action(
        self,
        action: str,
        label_name: str,
        source: SelectionSource,
        progress: ProgressCallback | None = None,
    ) -> ExecutionRecord:
        """Apply or remove a label on the current selection.

        Per-photo failures end up in the returned record and in the failure
        tracker. Whole-batch failures are recorded and then re-raised.

        Args:
            action: ``"add"`` or ``"remove"``.
            label_name: Label to apply or remove.
            source: Provider of the selected uids and the session token.
            progress: Optional ``(processed, total)`` callback.

        Returns:
            The stored ExecutionRecord.
        """
        if action not in ACTIONS:
            raise ValueError(f"Unknown action: {action}")
        label_name = label_name.strip()
        if not label_name:
            raise EmptyLabelError("Please enter a label name.")
        instance_id = self.store.instance_id()

        log.info(f"Action: {action} '{label_name}' on {instance_id}")
        started = time.monotonic()
        start_time = datetime.now().isoformat(timespec="seconds")
        total = 0
        try:
            selection = source.fetch()
            if not selection.uids:
                raise NoItemsSelectedError("No photos selected. Please select photos in PhotoPrism first.")
            total = len(selection.uids)
            result = self._dispatch(action, label_name, selection.uids, selection.token, progress)
        except Exception as exc:
            log.debug(f"Batch aborted: {exc}")
            self.recorder.record(
                ExecutionRecord(
                    action=action,
                    label_name=label_name,
                    total_count=total,
                    start_time=start_time,
                    duration=_elapsed_ms(started),
                    error=str(exc),
                )
            )
            raise

        record = self.recorder.record(
            ExecutionRecord(
                action=action,
                label_name=label_name,
                total_count=total,
                success_count=result.success_count,
                failed_count=result.failed_count,
                failed_uids=tuple(result.failed_uids),
                start_time=start_time,
                duration=_elapsed_ms(started),
            )
        )
        if result.failed_uids:
            self.failures.report_failure(action, label_name, result.failed_uids)
        else:
            self.failures.clear_failure(action, label_name)
        self.suggestions.add(label_name)
        return record

    def retry(
        self,
        index: int,
        source: SelectionSource,
        progress: ProgressCallback | None = None,
    ) -> ExecutionRecord:
        """Retry the failed uids of one failure group.

        Only the token is taken from ``source``; the uids come from the group.
        """
        group = self.failures.get(index)
        started = time.monotonic()
        start_time = datetime.now().isoformat(timespec="seconds")

        def rerun(failed: FailureGroup) -> BatchResult:
            return self._dispatch(failed.action, failed.label_name, failed.failed_uids, selection.token, progress)

        try:
            selection = source.fetch()
            result = self.failures.retry(index, rerun)
        except Exception as exc:
            log.debug(f"Batch aborted: {exc}")
            self.recorder.record(
                ExecutionRecord(
                    action=group.action,
                    label_name=group.label_name,
                    total_count=len(group.failed_uids),
                    start_time=start_time,
                    duration=_elapsed_ms(started),
                    error=str(exc),
                    is_retry=True,
                )
            )
            raise

        return self.recorder.record(
            ExecutionRecord(
                action=group.action,
                label_name=group.label_name,
                total_count=len(group.failed_uids),
                success_count=result.success_count,
                failed_count=result.failed_count,
                failed_uids=tuple(result.failed_uids),
                start_time=start_time,
                duration=_elapsed_ms(started),
                is_retry=True,
            )
        )

    def history(self) -> List[ExecutionRecord]:
        return self.recorder.history()

    def failure_groups(self) -> List[FailureGroup]:
        return self.failures.groups()

    def recent_labels(self) -> List[str]:
        return self.suggestions.recent()

    def all_labels(self) -> List[str]:
        return self.suggestions.all()

    def suggest(self, query: str) -> List[str]:
        return self.suggestions.suggest(query, self.cfg.storage.suggestion_limit)

    def clear_label_cache(self) -> None:
        self.resolver.clear()

    def clear_recent_labels(self) -> None:
        self.suggestions.clear()

    def clear_history(self) -> None:
        self.recorder.clear()

    def clear_failures(self) -> None:
        self.failures.clear()

    def clear_all(self) -> None:
        """Drop every cached list for the active instance only."""
        self.store.remove(ALL_KEYS)


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)
