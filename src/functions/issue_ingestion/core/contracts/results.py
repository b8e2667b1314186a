"""Result models for the issue ingestion pipeline."""

from __future__ import annotations

import json
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, PrivateAttr

from .issue_record import IssueRecord


class GroupState(str, Enum):
    """States of one batch group while it is being written.

    SUBMITTED -> RESOLVED when the store accepts everything.
    SUBMITTED -> PARTIALLY_REJECTED when it hands items back; retries move
    PARTIALLY_REJECTED -> RESOLVED, or to EXHAUSTED once retries run out.
    Any state -> FAILED when a store call raises.
    """

    SUBMITTED = "submitted"
    PARTIALLY_REJECTED = "partially_rejected"
    RESOLVED = "resolved"
    EXHAUSTED = "exhausted"
    FAILED = "failed"


class IngestionStatus(str, Enum):
    """Overall outcome of one ingestion cycle."""

    SUCCESS = "success"
    PARTIAL = "partial"
    FAILED = "failed"
    NO_RECORDS = "no_records"
    ERROR = "error"


class WriteResult(BaseModel):
    """Outcome of writing a single record."""

    succeeded: bool
    issue_id: str
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"succeeded": self.succeeded, "issueId": self.issue_id}
        if self.error is not None:
            payload["error"] = self.error
        return payload


class GroupReport(BaseModel):
    """Retry detail for one batch group."""

    index: int = Field(..., ge=0)
    size: int = Field(..., ge=0)
    state: GroupState = GroupState.SUBMITTED
    attempts: int = Field(default=0, ge=0, description="Resubmissions after the first request")
    delays: List[float] = Field(default_factory=list, description="Backoff waits in seconds")
    unprocessed: int = Field(default=0, ge=0)

    @property
    def successful(self) -> int:
        return self.size - self.unprocessed


class BatchOutcome(BaseModel):
    """Counters accumulated across every group of one write attempt.

    The records that are still unwritten are kept on the model (not
    serialised) so the fallback path writes exactly those records.
    """

    successful: int = Field(default=0, ge=0)
    failed: int = Field(default=0, ge=0)
    errors: List[str] = Field(default_factory=list)
    groups: List[GroupReport] = Field(default_factory=list)
    results: List[WriteResult] = Field(default_factory=list)

    _unresolved: List[IssueRecord] = PrivateAttr(default_factory=list)

    @property
    def unresolved(self) -> List[IssueRecord]:
        return list(self._unresolved)

    @property
    def total(self) -> int:
        return self.successful + self.failed

    def record_group(self, report: GroupReport, unresolved: List[IssueRecord], error: Optional[str] = None) -> None:
        """Fold one finished group into the totals."""

        self.groups.append(report)
        self.successful += report.successful
        self.failed += report.unprocessed
        self._unresolved.extend(unresolved)
        if error:
            self.errors.append(error)

    def record_item(self, result: WriteResult, record: IssueRecord) -> None:
        """Fold one single-item write into the totals."""

        self.results.append(result)
        if result.succeeded:
            self.successful += 1
        else:
            self.failed += 1
            self._unresolved.append(record)
            if result.error:
                self.errors.append(result.error)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "successful": self.successful,
            "failed": self.failed,
            "errors": list(self.errors),
        }
        if self.groups:
            payload["groups"] = [
                {
                    "index": group.index,
                    "size": group.size,
                    "state": group.state.value,
                    "retries": group.attempts,
                    "unprocessed": group.unprocessed,
                }
                for group in self.groups
            ]
        if self.results:
            payload["results"] = [result.to_dict() for result in self.results]
        return payload


class ParseErrorDetail(BaseModel):
    """A message that was excluded because it could not be parsed."""

    message_id: str
    error: str

    def to_dict(self) -> Dict[str, str]:
        return {"messageId": self.message_id, "error": self.error}


STATUS_CODES = {
    IngestionStatus.SUCCESS: 200,
    IngestionStatus.PARTIAL: 200,
    IngestionStatus.FAILED: 200,
    IngestionStatus.NO_RECORDS: 400,
    IngestionStatus.ERROR: 500,
}

STATUS_MESSAGES = {
    IngestionStatus.SUCCESS: "Successfully processed messages",
    IngestionStatus.PARTIAL: "Processed messages with some failures",
    IngestionStatus.FAILED: "Failed to persist any records",
    IngestionStatus.NO_RECORDS: "No valid records to process",
    IngestionStatus.ERROR: "Error processing messages",
}


class IngestionResult(BaseModel):
    """Container for the outcome of one ingestion cycle."""

    status: IngestionStatus
    total_processed: int = Field(default=0, ge=0)
    batch_results: Optional[BatchOutcome] = None
    fallback_results: Optional[BatchOutcome] = None
    parse_errors: List[ParseErrorDetail] = Field(default_factory=list)
    error: Optional[str] = None
    failed_message_ids: List[str] = Field(
        default_factory=list,
        description="Queue messages whose records were not persisted",
    )

    @property
    def status_code(self) -> int:
        return STATUS_CODES[self.status]

    @property
    def persisted(self) -> int:
        persisted = self.batch_results.successful if self.batch_results else 0
        if self.fallback_results:
            persisted += self.fallback_results.successful
        return persisted

    def results_dict(self) -> Dict[str, Any]:
        """Return the ``results`` object of the response body."""

        payload: Dict[str, Any] = {"totalProcessed": self.total_processed}
        if self.batch_results is not None:
            payload["batchResults"] = self.batch_results.to_dict()
        if self.fallback_results is not None:
            payload["fallbackResults"] = self.fallback_results.to_dict()
        if self.parse_errors:
            payload["parseErrors"] = [detail.to_dict() for detail in self.parse_errors]
        return payload

    def to_response(self) -> Dict[str, Any]:
        """Return the handler response for the queue-delivery runtime.

        ``batchItemFailures`` lists only messages whose records could not be
        persisted, so a redelivery can succeed. Parse failures and cycle
        errors are not listed and will not be redelivered.
        """

        body: Dict[str, Any] = {
            "message": STATUS_MESSAGES[self.status],
            "status": self.status.value,
            "results": self.results_dict(),
        }
        if self.error:
            body["error"] = self.error
        return {
            "statusCode": self.status_code,
            "body": json.dumps(body),
            "batchItemFailures": [
                {"itemIdentifier": message_id} for message_id in self.failed_message_ids
            ],
        }
