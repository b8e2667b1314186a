"""Record processors for issue ingestion."""

from .record_builder import UNKNOWN_ISSUE_PREFIX, RecordBuilder, fallback_issue_id, format_timestamp

__all__ = ["UNKNOWN_ISSUE_PREFIX", "RecordBuilder", "fallback_issue_id", "format_timestamp"]
