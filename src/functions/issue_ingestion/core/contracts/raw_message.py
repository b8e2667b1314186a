"""Queue message envelope as seen by the ingestion pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True)
class RawMessage:
    """One decoded queue message.

    Attributes:
        message_id: Queue message id, or ``index-<n>`` when the queue sent none
        title: Envelope title, if any
        content: Free-text payload with ``Key: Value`` lines
        received_at: When the queue accepted the message, else when it was picked up (UTC)
        attributes: Structured issue fields carried by the envelope itself
    """

    message_id: str
    title: Optional[str]
    content: str
    received_at: datetime
    attributes: Dict[str, str] = field(default_factory=dict, hash=False)

    @property
    def received_epoch_millis(self) -> int:
        return (self.received_at - _EPOCH) // timedelta(milliseconds=1)
