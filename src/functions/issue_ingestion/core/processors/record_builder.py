"""Build storage-ready issue records from parsed messages."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Mapping, Optional

from ..contracts import CANONICAL_ATTRIBUTES, IssueRecord, RawMessage
from ..parsing import FIELD_ALIASES

UNKNOWN_ISSUE_PREFIX = "unknown-"

_CANONICAL_FIELDS = ("summary", "priority", "creator", "status", "assignee")
_RESERVED = set(CANONICAL_ATTRIBUTES) | set(FIELD_ALIASES.values())


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(moment: datetime) -> str:
    """ISO-8601 UTC with millisecond precision and a ``Z`` suffix."""
    moment = moment.astimezone(timezone.utc)
    return f"{moment.strftime('%Y-%m-%dT%H:%M:%S')}.{moment.microsecond // 1000:03d}Z"


def fallback_issue_id(epoch_millis: int) -> str:
    """Identifier used when a message carries no issue key."""
    return f"{UNKNOWN_ISSUE_PREFIX}{epoch_millis}"


class RecordBuilder:
    """Combine a RawMessage and its parsed fields into an IssueRecord.

    Parsed content wins over structured fields carried by the envelope, which
    only fill slots the content left empty. Extension fields never replace a
    canonical attribute.

    One builder serves one cycle. Within it, timestamps are strictly
    increasing and generated ``unknown-<millis>`` ids never repeat.
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self._clock = clock or _utc_now
        self._last: Optional[datetime] = None
        self._last_fallback_millis: Optional[int] = None

    def _next_timestamp(self) -> datetime:
        now = self._clock()
        now = now.replace(microsecond=now.microsecond // 1000 * 1000)
        if self._last is not None and now <= self._last:
            now = self._last + timedelta(milliseconds=1)
        self._last = now
        return now

    def _fallback_id(self, message: RawMessage) -> str:
        millis = message.received_epoch_millis
        if self._last_fallback_millis is not None and millis <= self._last_fallback_millis:
            # same arrival millisecond as an earlier keyless message
            millis = self._last_fallback_millis + 1
        self._last_fallback_millis = millis
        return fallback_issue_id(millis)

    def build(self, message: RawMessage, fields: Mapping[str, str]) -> IssueRecord:
        merged: Dict[str, str] = dict(message.attributes)
        merged.update(fields)

        timestamp = format_timestamp(self._next_timestamp())
        issue_id = merged.get("issueKey") or self._fallback_id(message)

        extra = {
            name: value
            for name, value in merged.items()
            if name not in _RESERVED
        }

        return IssueRecord(
            issue_id=issue_id,
            timestamp=timestamp,
            title=message.title,
            content=message.content,
            extra=extra,
            message_id=message.message_id,
            **{name: merged.get(name) for name in _CANONICAL_FIELDS},
        )
