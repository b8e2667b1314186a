"""Per-item fallback writes for records the batch path could not persist."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Sequence

from ..contracts import BatchOutcome, IssueRecord, WriteResult

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 10


class FallbackWriter:
    """Writes each record with its own PutItem call, all in parallel.

    Every write is isolated: an exception is captured into that record's
    WriteResult and never cancels or fails its siblings. Results keep the
    input order.
    """

    def __init__(self, store: Any, max_workers: int = DEFAULT_MAX_WORKERS):
        self.store = store
        self.max_workers = max_workers

    def write(self, records: Sequence[IssueRecord]) -> BatchOutcome:
        outcome = BatchOutcome()
        if not records:
            return outcome

        logger.info("Falling back to individual writes for %d record(s)", len(records))
        workers = min(self.max_workers, len(records))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="fallback-put") as executor:
            results = list(executor.map(self._write_one, records))

        for record, result in zip(records, results):
            outcome.record_item(result, record)

        logger.info(
            "Fallback write complete: %d succeeded, %d failed",
            outcome.successful,
            outcome.failed,
        )
        return outcome

    def _write_one(self, record: IssueRecord) -> WriteResult:
        try:
            self.store.put(record.to_item())
        except Exception as exc:  # noqa: BLE001 - isolate each write
            logger.error("Fallback write failed for %s: %s", record.issue_id, exc)
            return WriteResult(
                succeeded=False,
                issue_id=record.issue_id,
                error=f"Failed to write {record.issue_id}: {exc}",
            )
        return WriteResult(succeeded=True, issue_id=record.issue_id)
