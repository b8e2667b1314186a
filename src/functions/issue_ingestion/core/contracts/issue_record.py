"""Issue record persisted to the DynamoDB table."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

# Attribute names written for every record. Extension attributes with one of
# these names are dropped when the item is built.
CANONICAL_ATTRIBUTES = (
    "issueId",
    "timestamp",
    "title",
    "content",
    "summary",
    "priority",
    "creator",
    "status",
    "assignee",
    "lastUpdated",
    "processedAt",
)


@dataclass(frozen=True)
class IssueRecord:
    """One version of an issue, keyed by ``(issueId, timestamp)``.

    ``timestamp`` is part of the table key, so ingesting the same message
    twice stores two versions instead of overwriting the first.
    """

    issue_id: str
    timestamp: str
    title: Optional[str] = None
    content: Optional[str] = None
    summary: Optional[str] = None
    priority: Optional[str] = None
    creator: Optional[str] = None
    status: Optional[str] = None
    assignee: Optional[str] = None
    extra: Dict[str, str] = field(default_factory=dict, hash=False)
    # Not persisted; lets failures be traced back to the queue message
    message_id: Optional[str] = field(default=None, compare=False)

    @property
    def key(self) -> Tuple[str, str]:
        return (self.issue_id, self.timestamp)

    @property
    def last_updated(self) -> str:
        return self.timestamp

    @property
    def processed_at(self) -> str:
        return self.timestamp

    def to_item(self) -> Dict[str, Any]:
        """Return the DynamoDB item, omitting attributes with no value."""
        item: Dict[str, Any] = {
            name: value
            for name, value in self.extra.items()
            if name not in CANONICAL_ATTRIBUTES and value is not None
        }
        canonical = {
            "issueId": self.issue_id,
            "timestamp": self.timestamp,
            "title": self.title,
            "content": self.content,
            "summary": self.summary,
            "priority": self.priority,
            "creator": self.creator,
            "status": self.status,
            "assignee": self.assignee,
            "lastUpdated": self.last_updated,
            "processedAt": self.processed_at,
        }
        item.update({name: value for name, value in canonical.items() if value is not None})
        return item


def item_key(item: Dict[str, Any]) -> Tuple[Any, Any]:
    """Return the ``(issueId, timestamp)`` key of a stored item."""
    return (item.get("issueId"), item.get("timestamp"))
