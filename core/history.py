"""Execution history of label batches."""

from __future__ import annotations

import time
from dataclasses import asdict, dataclass, field, replace
from typing import Any, Dict, List

from core.store import EXECUTION_HISTORY_KEY, InstanceStore


DEFAULT_HISTORY_LIMIT = 50


@dataclass(frozen=True)
class ExecutionRecord:
    """One completed or aborted batch invocation."""

    action: str
    label_name: str
    total_count: int = 0
    success_count: int = 0
    failed_count: int = 0
    failed_uids: tuple[str, ...] = field(default_factory=tuple)
    start_time: str = ""
    duration: int = 0
    error: str | None = None
    is_retry: bool = False
    id: str = ""

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["failed_uids"] = list(self.failed_uids)
        return data

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "ExecutionRecord":
        return cls(
            action=str(raw.get("action", "")),
            label_name=str(raw.get("label_name", "")),
            total_count=int(raw.get("total_count", 0)),
            success_count=int(raw.get("success_count", 0)),
            failed_count=int(raw.get("failed_count", 0)),
            failed_uids=tuple(str(uid) for uid in raw.get("failed_uids") or []),
            start_time=str(raw.get("start_time", "")),
            duration=int(raw.get("duration", 0)),
            error=raw.get("error"),
            is_retry=bool(raw.get("is_retry", False)),
            id=str(raw.get("id", "")),
        )


def _next_id(history: List[Dict[str, Any]]) -> str:
    candidate = time.time_ns()
    if history:
        try:
            candidate = max(candidate, int(history[0].get("id", 0)) + 1)
        except (TypeError, ValueError):
            pass
    return str(candidate)


class ExecutionRecorder:
    """Bounded, newest-first log of execution records."""

    def __init__(self, store: InstanceStore, limit: int = DEFAULT_HISTORY_LIMIT) -> None:
        self.store = store
        self.limit = limit

    def record(self, record: ExecutionRecord) -> ExecutionRecord:
        """Assign an id, prepend the record and truncate the log.

        Args:
            record: Record without an id.

        Returns:
            The stored record, id included.
        """
        history = list(self.store.get(EXECUTION_HISTORY_KEY, []))
        stored = replace(record, id=_next_id(history))
        history.insert(0, stored.to_dict())
        self.store.set(EXECUTION_HISTORY_KEY, history[: self.limit])
        return stored

    def history(self) -> List[ExecutionRecord]:
        return [ExecutionRecord.from_dict(raw) for raw in self.store.get(EXECUTION_HISTORY_KEY, [])]

    def clear(self) -> None:
        self.store.remove([EXECUTION_HISTORY_KEY])
