"""Exceptions raised by the issue ingestion pipeline."""

from __future__ import annotations

from typing import Optional, Sequence


class IngestionError(Exception):
    """Base class for issue ingestion failures."""


class MessageParseError(IngestionError):
    """A single queue message could not be turned into a record."""

    def __init__(self, message_id: str, reason: str):
        super().__init__(f"{message_id}: {reason}")
        self.message_id = message_id
        self.reason = reason


class StoreWriteError(IngestionError):
    """A store call raised instead of returning unprocessed items."""

    def __init__(self, reason: str, issue_ids: Optional[Sequence[str]] = None):
        super().__init__(reason)
        self.reason = reason
        self.issue_ids = list(issue_ids or [])
