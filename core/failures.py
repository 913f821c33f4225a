"""Outstanding failure groups and retry-by-group."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List

from core.batch import BatchResult
from core.errors import FailureGroupNotFoundError
from core.store import FAILED_OPERATIONS_KEY, InstanceStore
from logger import get_logger

log = get_logger()

DEFAULT_FAILURE_LIMIT = 20


def _now_iso() -> str:
    return datetime.now().isoformat(timespec="seconds")


@dataclass
class FailureGroup:
    """Uids still failing for one (action, label) pair."""

    action: str
    label_name: str
    failed_uids: List[str] = field(default_factory=list)
    timestamp: str = ""
    retry_count: int = 0

    @property
    def key(self) -> tuple[str, str]:
        return failure_key(self.action, self.label_name)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "FailureGroup":
        return cls(
            action=str(raw.get("action", "")),
            label_name=str(raw.get("label_name", "")),
            failed_uids=[str(uid) for uid in raw.get("failed_uids") or []],
            timestamp=str(raw.get("timestamp", "")),
            retry_count=int(raw.get("retry_count", 0)),
        )


def failure_key(action: str, label_name: str) -> tuple[str, str]:
    return action, label_name.lower()


class FailureTracker:
    """Bounded, newest-first set of failure groups, one per (action, label)."""

    def __init__(self, store: InstanceStore, limit: int = DEFAULT_FAILURE_LIMIT) -> None:
        self.store = store
        self.limit = limit

    def groups(self) -> List[FailureGroup]:
        return [FailureGroup.from_dict(raw) for raw in self.store.get(FAILED_OPERATIONS_KEY, [])]

    def _save(self, groups: List[FailureGroup]) -> None:
        self.store.set(FAILED_OPERATIONS_KEY, [group.to_dict() for group in groups[: self.limit]])

    def get(self, index: int) -> FailureGroup:
        groups = self.groups()
        if index < 0 or index >= len(groups):
            raise FailureGroupNotFoundError(f"No failed operation at index {index}")
        return groups[index]

    def report_failure(
        self,
        action: str,
        label_name: str,
        failed_uids: List[str],
        is_retry: bool = False,
    ) -> FailureGroup:
        """Insert or update the failure group for (action, label).

        An existing group keeps its position; only its uids and timestamp are
        replaced, and its retry count moves only when ``is_retry`` is set.
        """
        groups = self.groups()
        key = failure_key(action, label_name)
        for group in groups:
            if group.key == key:
                group.failed_uids = list(failed_uids)
                group.timestamp = _now_iso()
                if is_retry:
                    group.retry_count += 1
                self._save(groups)
                return group

        group = FailureGroup(
            action=action,
            label_name=label_name,
            failed_uids=list(failed_uids),
            timestamp=_now_iso(),
            retry_count=0,
        )
        groups.insert(0, group)
        self._save(groups)
        return group

    def clear_failure(self, action: str, label_name: str) -> None:
        key = failure_key(action, label_name)
        groups = self.groups()
        remaining = [group for group in groups if group.key != key]
        if len(remaining) != len(groups):
            self._save(remaining)

    def retry(self, index: int, rerun: Callable[[FailureGroup], BatchResult]) -> BatchResult:
        """Re-run one group's failed uids and update the group from the outcome.

        Args:
            index: Position of the group in ``groups()``.
            rerun: Callable dispatching the batch for the group.

        Returns:
            BatchResult of the retry.
        """
        group = self.get(index)
        log.info(f"Retrying {len(group.failed_uids)} failed photos for {group.action} '{group.label_name}'")
        result = rerun(group)
        if result.failed_uids:
            self.report_failure(group.action, group.label_name, result.failed_uids, is_retry=True)
        else:
            self.clear_failure(group.action, group.label_name)
        return result

    def clear(self) -> None:
        self.store.remove([FAILED_OPERATIONS_KEY])
