import json

import pytest

from src.functions.issue_ingestion.core.errors import MessageParseError
from src.functions.issue_ingestion.core.parsing import decode_record

from tests.issue_ingestion.fixtures import BASE_TIME, SAMPLE_CONTENT, queue_record


def test_decode_record_without_unwrapping():
    record = queue_record("m-1", {"title": "Ticket", "content": SAMPLE_CONTENT})

    message = decode_record(record, 0, received_at=BASE_TIME, unwrap="none")

    assert message.message_id == "m-1"
    assert message.title == "Ticket"
    assert message.content == SAMPLE_CONTENT
    assert message.received_at == BASE_TIME


def test_decode_record_unwraps_message_string():
    record = queue_record("m-1", {"title": "Ticket", "content": SAMPLE_CONTENT}, wrap=True)

    message = decode_record(record, 0, received_at=BASE_TIME, unwrap="message")

    assert message.content == SAMPLE_CONTENT


def test_decode_record_unwraps_message_object():
    body = {"Message": {"title": "Ticket", "content": "Key: X-1"}}
    record = {"messageId": "m-2", "body": json.dumps(body)}

    message = decode_record(record, 0, received_at=BASE_TIME, unwrap="message")

    assert message.title == "Ticket"
    assert message.content == "Key: X-1"


def test_decode_record_collects_structured_envelope_fields():
    envelope = {"issueKey": "OPS-9", "description": "Disk full", "created": 1714560000, "content": ""}
    record = queue_record("m-3", envelope)

    message = decode_record(record, 0, received_at=BASE_TIME, unwrap="none")

    assert message.attributes == {"issueKey": "OPS-9", "description": "Disk full", "created": "1714560000"}
    assert message.title is None


def test_decode_record_rejects_invalid_json():
    record = {"messageId": "bad-1", "body": "{not json"}

    with pytest.raises(MessageParseError) as excinfo:
        decode_record(record, 0, received_at=BASE_TIME, unwrap="none")

    assert excinfo.value.message_id == "bad-1"


def test_decode_record_rejects_non_object_body():
    record = {"messageId": "bad-2", "body": json.dumps(["a", "b"])}

    with pytest.raises(MessageParseError):
        decode_record(record, 0, received_at=BASE_TIME, unwrap="none")


def test_decode_record_requires_message_field_when_unwrapping():
    record = queue_record("bad-3", {"content": SAMPLE_CONTENT})

    with pytest.raises(MessageParseError) as excinfo:
        decode_record(record, 0, received_at=BASE_TIME, unwrap="message")

    assert "Message" in excinfo.value.reason


def test_decode_record_uses_position_when_message_id_missing():
    record = {"body": "oops"}

    with pytest.raises(MessageParseError) as excinfo:
        decode_record(record, 3, received_at=BASE_TIME, unwrap="none")

    assert excinfo.value.message_id == "index-3"


def test_decode_record_prefers_queue_sent_timestamp():
    record = queue_record("m-1", {"title": "Ticket", "content": SAMPLE_CONTENT})
    record["attributes"] = {"SentTimestamp": "1714564800123"}

    message = decode_record(record, 0, received_at=BASE_TIME, unwrap="none")

    assert message.received_epoch_millis == 1714564800123


def test_decode_record_ignores_unreadable_sent_timestamp():
    record = queue_record("m-1", {"title": "Ticket", "content": SAMPLE_CONTENT})
    record["attributes"] = {"SentTimestamp": "soon"}

    message = decode_record(record, 0, received_at=BASE_TIME, unwrap="none")

    assert message.received_at == BASE_TIME
