"""Concurrent per-photo dispatch with progress accounting."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Callable, Sequence

from logger import get_logger

log = get_logger()

ProgressCallback = Callable[[int, int], None]
Operation = Callable[[str], object]


@dataclass
class BatchResult:
    """Aggregate outcome of one batch."""

    success_count: int = 0
    failed_count: int = 0
    failed_uids: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.success_count + self.failed_count


def run_batch(
    uids: Sequence[str],
    operation: Operation,
    progress: ProgressCallback | None = None,
) -> BatchResult:
    """Run ``operation`` for every uid concurrently and wait for all of them.

    Every call is in flight at once. Any exception raised by a call counts as
    a failure for that uid only; the batch never stops early.

    Args:
        uids: Photo identifiers, duplicates included.
        operation: Callable performing the API call for one uid.
        progress: Optional callback receiving ``(processed, total)``.

    Returns:
        BatchResult with counts and the failed uids.
    """
    total = len(uids)
    result = BatchResult()
    processed = 0
    log.info(f"Starting batch process for {total} photos")
    _report(progress, processed, total)
    if not total:
        return result

    with ThreadPoolExecutor(max_workers=total) as executor:
        futures = {executor.submit(operation, uid): uid for uid in uids}
        for future in as_completed(futures):
            uid = futures[future]
            try:
                future.result()
            except Exception as exc:
                log.warn(f"Failed for UID: {uid}, Error: {exc}")
                result.failed_count += 1
                result.failed_uids.append(uid)
            else:
                log.debug(f"Success for UID: {uid}")
                result.success_count += 1
            processed += 1
            _report(progress, processed, total)

    log.info(f"Batch process finished. Success: {result.success_count}, Failed: {result.failed_count}")
    return result


def _report(progress: ProgressCallback | None, processed: int, total: int) -> None:
    # A broken callback must not stop outcome accounting.
    if not progress:
        return
    try:
        progress(processed, total)
    except Exception as exc:
        log.warn(f"Progress callback failed at {processed}/{total}: {exc}")
