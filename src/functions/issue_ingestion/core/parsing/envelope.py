"""Decode queue records into RawMessage envelopes.

Queue bodies are JSON. Depending on how the queue is fed, the issue envelope
is either the body itself (``none``) or sits in the ``Message`` field of a
notification wrapper (``message``), as a JSON string or an object.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Mapping

from ..config import UNWRAP_MESSAGE, UNWRAP_MODES
from ..contracts import RawMessage
from ..errors import MessageParseError

logger = logging.getLogger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# Structured issue fields an envelope may carry next to its free-text content
ENVELOPE_FIELDS = (
    "issueKey",
    "summary",
    "priority",
    "creator",
    "status",
    "assignee",
    "description",
    "created",
)


def message_identifier(record: Mapping[str, Any], index: int) -> str:
    """Return the queue message id, or a positional stand-in."""
    message_id = record.get("messageId") if isinstance(record, Mapping) else None
    return str(message_id) if message_id else f"index-{index}"


def _load_json(raw: Any, message_id: str, what: str) -> Dict[str, Any]:
    if isinstance(raw, Mapping):
        return dict(raw)
    if not isinstance(raw, (str, bytes, bytearray)):
        raise MessageParseError(message_id, f"{what} is missing or not JSON text")
    try:
        decoded = json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise MessageParseError(message_id, f"{what} is not valid JSON: {exc}") from exc
    if not isinstance(decoded, dict):
        raise MessageParseError(message_id, f"{what} must be a JSON object, got {type(decoded).__name__}")
    return decoded


def arrival_time(record: Mapping[str, Any], default: datetime) -> datetime:
    """Return when the queue accepted *record*, or *default* when it does not say.

    SQS reports ``attributes.SentTimestamp`` in epoch milliseconds.
    """
    attributes = record.get("attributes") if isinstance(record, Mapping) else None
    sent = attributes.get("SentTimestamp") if isinstance(attributes, Mapping) else None
    try:
        return _EPOCH + timedelta(milliseconds=int(sent))
    except (TypeError, ValueError, OverflowError):
        return default


def _as_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return str(value)


def decode_record(
    record: Mapping[str, Any],
    index: int,
    received_at: datetime,
    unwrap: str = UNWRAP_MESSAGE,
) -> RawMessage:
    """Decode one queue record.

    Args:
        record: Queue record with a ``body`` (and usually a ``messageId``)
        index: Position of the record in the event, used when it has no id
        received_at: Pickup time, used when the record carries no SentTimestamp
        unwrap: ``none`` or ``message``

    Raises:
        MessageParseError: If the body (or wrapped message) is not a JSON object
    """
    if unwrap not in UNWRAP_MODES:
        raise ValueError(f"Unknown unwrap mode: {unwrap}")

    message_id = message_identifier(record, index)
    if not isinstance(record, Mapping):
        raise MessageParseError(message_id, "queue record is not an object")

    envelope = _load_json(record.get("body"), message_id, "body")
    if unwrap == UNWRAP_MESSAGE:
        if "Message" not in envelope:
            raise MessageParseError(message_id, "body has no 'Message' field to unwrap")
        envelope = _load_json(envelope["Message"], message_id, "Message")

    content = envelope.get("content")
    title = envelope.get("title")
    attributes = {
        name: _as_text(envelope[name])
        for name in ENVELOPE_FIELDS
        if envelope.get(name) is not None
    }

    if content is None:
        logger.debug("Message %s has no content; relying on envelope fields", message_id)

    return RawMessage(
        message_id=message_id,
        title=_as_text(title) if title is not None else None,
        content=_as_text(content) if content is not None else "",
        received_at=arrival_time(record, received_at),
        attributes=attributes,
    )
