"""
Issue ingestion pipeline.

Orchestrates one cycle: decode, parse and build records, batch write, then
fallback write for what the batch left behind, and summarize.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, List, Mapping, Optional, Sequence, Tuple

from ..config import IngestionConfig
from ..contracts import (
    BatchOutcome,
    IngestionResult,
    IngestionStatus,
    IssueRecord,
    ParseErrorDetail,
)
from ..db import BatchWriter, FallbackWriter, IssueStore
from ..errors import MessageParseError
from ..parsing import decode_record, message_identifier, parse_content
from ..processors import RecordBuilder

logger = logging.getLogger(__name__)


class IngestionPipeline:
    """
    Turns a batch of queue records into persisted issue records.

    ``run`` never raises. Bad messages are reported in ``parse_errors``,
    write failures are counted in the outcomes, and anything unexpected
    becomes an ``error`` result so the queue is not pushed into redelivering
    a message that can never succeed.
    """

    def __init__(
        self,
        config: IngestionConfig,
        store: Optional[Any] = None,
        batch_writer: Optional[BatchWriter] = None,
        fallback_writer: Optional[FallbackWriter] = None,
        builder: Optional[RecordBuilder] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize ingestion pipeline.

        Args:
            config: Ingestion configuration
            store: Store shared by both writers (defaults to IssueStore on the configured table)
            batch_writer: Optional BatchWriter override (for testing)
            fallback_writer: Optional FallbackWriter override (for testing)
            builder: Optional RecordBuilder override
            clock: UTC clock used for arrival times of records without SentTimestamp
        """
        self.config = config
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self.store = store if store is not None else IssueStore(config.table_name, dynamo_config=config.dynamo)
        self.batch_writer = batch_writer or BatchWriter(
            self.store,
            batch_size=config.batch_size,
            max_retries=config.max_retries,
            base_delay=config.base_delay_seconds,
        )
        self.fallback_writer = fallback_writer or FallbackWriter(
            self.store, max_workers=config.fallback_max_workers
        )
        self.builder = builder or RecordBuilder(clock=self._clock)

    def run(self, queue_records: Sequence[Mapping[str, Any]], deadline: Optional[float] = None) -> IngestionResult:
        """
        Run one ingestion cycle.

        Args:
            queue_records: The ``Records`` list of the queue event
            deadline: Optional monotonic deadline after which no backoff starts

        Returns:
            IngestionResult describing the cycle
        """
        try:
            return self._run(queue_records, deadline)
        except Exception as exc:  # noqa: BLE001 - never hand an exception back to the queue
            logger.exception("Unrecoverable error during ingestion cycle")
            return IngestionResult(status=IngestionStatus.ERROR, error=str(exc))

    def _run(self, queue_records: Sequence[Mapping[str, Any]], deadline: Optional[float]) -> IngestionResult:
        logger.info("Starting ingestion cycle for %d queue record(s)", len(queue_records))

        records, parse_errors = self.build_records(queue_records)
        if not records:
            logger.warning(
                "No valid records in cycle (%d parse error(s)); store not called",
                len(parse_errors),
            )
            return IngestionResult(status=IngestionStatus.NO_RECORDS, parse_errors=parse_errors)

        batch_results = self.batch_writer.write(records, deadline=deadline)

        fallback_results: Optional[BatchOutcome] = None
        unresolved = batch_results.unresolved
        if batch_results.failed > 0:
            fallback_results = self.fallback_writer.write(unresolved)
            unresolved = fallback_results.unresolved

        result = IngestionResult(
            status=self._status(batch_results, fallback_results, unresolved, parse_errors),
            total_processed=len(records),
            batch_results=batch_results,
            fallback_results=fallback_results,
            parse_errors=parse_errors,
            failed_message_ids=self._message_ids(unresolved),
        )
        logger.info(
            "Ingestion cycle finished with status %s: %d/%d persisted, %d parse error(s)",
            result.status.value,
            result.persisted,
            len(records),
            len(parse_errors),
        )
        return result

    def build_records(
        self, queue_records: Sequence[Mapping[str, Any]]
    ) -> Tuple[List[IssueRecord], List[ParseErrorDetail]]:
        """Decode, parse and build a record per queue message.

        A message that fails at any step is reported and skipped.
        """
        records: List[IssueRecord] = []
        parse_errors: List[ParseErrorDetail] = []

        for index, queue_record in enumerate(queue_records):
            try:
                message = decode_record(
                    queue_record,
                    index,
                    received_at=self._clock(),
                    unwrap=self.config.envelope_unwrap,
                )
                records.append(self.builder.build(message, parse_content(message.content)))
            except MessageParseError as exc:
                logger.warning("Skipping message %s: %s", exc.message_id, exc.reason)
                parse_errors.append(ParseErrorDetail(message_id=exc.message_id, error=exc.reason))
            except Exception as exc:  # noqa: BLE001 - one bad message must not sink the batch
                message_id = message_identifier(queue_record, index)
                logger.warning("Skipping message %s: %s", message_id, exc, exc_info=True)
                parse_errors.append(ParseErrorDetail(message_id=message_id, error=str(exc)))

        return records, parse_errors

    @staticmethod
    def _status(
        batch_results: BatchOutcome,
        fallback_results: Optional[BatchOutcome],
        unresolved: List[IssueRecord],
        parse_errors: List[ParseErrorDetail],
    ) -> IngestionStatus:
        persisted = batch_results.successful + (fallback_results.successful if fallback_results else 0)
        if not unresolved:
            return IngestionStatus.PARTIAL if parse_errors else IngestionStatus.SUCCESS
        if persisted == 0:
            return IngestionStatus.FAILED
        return IngestionStatus.PARTIAL

    @staticmethod
    def _message_ids(records: Sequence[IssueRecord]) -> List[str]:
        ids: List[str] = []
        for record in records:
            if record.message_id and record.message_id not in ids:
                ids.append(record.message_id)
        return ids
