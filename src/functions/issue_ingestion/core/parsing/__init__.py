"""Parsers for queue envelopes and free-text issue content."""

from .content_parser import FIELD_ALIASES, parse_content
from .envelope import ENVELOPE_FIELDS, arrival_time, decode_record, message_identifier

__all__ = [
    "FIELD_ALIASES",
    "parse_content",
    "ENVELOPE_FIELDS",
    "arrival_time",
    "decode_record",
    "message_identifier",
]
