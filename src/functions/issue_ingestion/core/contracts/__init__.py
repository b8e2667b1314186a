"""Data contracts for issue ingestion."""

from .issue_record import CANONICAL_ATTRIBUTES, IssueRecord, item_key
from .raw_message import RawMessage
from .results import (
    BatchOutcome,
    GroupReport,
    GroupState,
    IngestionResult,
    IngestionStatus,
    ParseErrorDetail,
    WriteResult,
)

__all__ = [
    "CANONICAL_ATTRIBUTES",
    "IssueRecord",
    "item_key",
    "RawMessage",
    "BatchOutcome",
    "GroupReport",
    "GroupState",
    "IngestionResult",
    "IngestionStatus",
    "ParseErrorDetail",
    "WriteResult",
]
