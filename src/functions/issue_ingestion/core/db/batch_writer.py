"""
Batch writer for issue records.

Splits records into groups of at most 25 (the BatchWriteItem limit), writes
the groups one after another, and resubmits items the store hands back as
unprocessed with exponential backoff.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from src.shared.batch import BackoffPolicy, chunked

from ..config import BASE_DELAY_MS, MAX_BATCH_RETRIES, MAX_BATCH_SIZE
from ..contracts import BatchOutcome, GroupReport, GroupState, IssueRecord, item_key

logger = logging.getLogger(__name__)


class BatchWriter:
    """
    Writes issue records with BatchWriteItem.

    Each group moves through ``GroupState``: a first submission either
    resolves it or leaves it partially rejected; rejected items are retried
    up to ``max_retries`` times, waiting ``base_delay * 2**attempt`` between
    attempts. Whatever is still unprocessed afterwards counts as failed and
    is returned on ``BatchOutcome.unresolved`` for the fallback writer.

    A store exception fails the items still pending in that group only;
    later groups are written regardless.
    """

    def __init__(
        self,
        store: Any,
        batch_size: int = MAX_BATCH_SIZE,
        max_retries: int = MAX_BATCH_RETRIES,
        base_delay: float = BASE_DELAY_MS / 1000.0,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize batch writer.

        Args:
            store: Object with ``batch_put(items) -> unprocessed items``
            batch_size: Maximum records per BatchWriteItem request
            max_retries: Resubmissions allowed per group
            base_delay: First backoff wait in seconds
            sleep: Sleep function (injected in tests)
            clock: Monotonic clock used to honour deadlines
        """
        if not 1 <= batch_size <= MAX_BATCH_SIZE:
            raise ValueError(f"batch_size must be between 1 and {MAX_BATCH_SIZE}")
        self.store = store
        self.batch_size = batch_size
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.sleep = sleep
        self.clock = clock

    def write(self, records: Sequence[IssueRecord], deadline: Optional[float] = None) -> BatchOutcome:
        """
        Write records in bounded groups.

        Args:
            records: Records to persist, in the order they should be written
            deadline: Optional ``clock()`` value after which no backoff starts

        Returns:
            BatchOutcome with successful + failed == len(records)
        """
        outcome = BatchOutcome()
        if not records:
            logger.info("No records to write")
            return outcome

        policy = BackoffPolicy(
            max_retries=self.max_retries,
            base_delay=self.base_delay,
            deadline=deadline,
            sleep=self.sleep,
            clock=self.clock,
        )
        group_count = (len(records) + self.batch_size - 1) // self.batch_size
        logger.info(
            "Starting batch write of %d records in %d group(s) to %s",
            len(records),
            group_count,
            getattr(self.store, "table_name", "store"),
        )

        for index, group in enumerate(chunked(records, self.batch_size)):
            logger.debug("Writing group %d/%d (%d records)", index + 1, group_count, len(group))
            report, unresolved, error = self._write_group(index, group, policy)
            outcome.record_group(report, unresolved, error)

        logger.info(
            "Batch write complete: %d/%d records written, %d unresolved",
            outcome.successful,
            len(records),
            outcome.failed,
        )
        return outcome

    def _write_group(
        self,
        index: int,
        group: List[IssueRecord],
        policy: BackoffPolicy,
    ) -> Tuple[GroupReport, List[IssueRecord], Optional[str]]:
        report = GroupReport(index=index, size=len(group))
        by_key = {record.key: record for record in group}
        pending: List[Dict[str, Any]] = [record.to_item() for record in group]
        error: Optional[str] = None

        try:
            pending = self.store.batch_put(pending)
            while pending:
                report.state = GroupState.PARTIALLY_REJECTED
                if not policy.should_retry(report.attempts):
                    report.state = GroupState.EXHAUSTED
                    break
                delay = policy.wait(report.attempts)
                report.delays.append(delay)
                logger.warning(
                    "Group %d: %d item(s) unprocessed, retry %d/%d after %.3fs",
                    index + 1,
                    len(pending),
                    report.attempts + 1,
                    policy.max_retries,
                    delay,
                )
                pending = self.store.batch_put(pending)
                report.attempts += 1
            else:
                report.state = GroupState.RESOLVED
        except Exception as exc:  # noqa: BLE001 - one group must not abort the rest
            report.state = GroupState.FAILED
            error = f"Group {index + 1} write failed: {exc}"
            logger.error("Group %d write failed with %d item(s) pending: %s", index + 1, len(pending), exc)

        unresolved = self._match_records(pending, by_key)
        report.unprocessed = len(unresolved)

        if report.state is GroupState.EXHAUSTED:
            error = (
                f"Group {index + 1}: {report.unprocessed} item(s) still unprocessed "
                f"after {report.attempts} retries"
            )
            logger.error(error)

        return report, unresolved, error

    @staticmethod
    def _match_records(
        items: Sequence[Dict[str, Any]],
        by_key: Dict[Tuple[str, str], IssueRecord],
    ) -> List[IssueRecord]:
        """Map unprocessed store items back to the records they came from."""
        matched: List[IssueRecord] = []
        seen = set()
        for item in items:
            key = item_key(item)
            record = by_key.get(key)
            if record is None:
                logger.warning("Store returned unknown item %s", key)
                continue
            if key not in seen:
                seen.add(key)
                matched.append(record)
        return matched
