"""
Test doubles and sample data for issue ingestion tests.
"""

import json
import threading
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional, Set

from src.functions.issue_ingestion.core.contracts import IssueRecord, item_key
from src.functions.issue_ingestion.core.processors import format_timestamp

SAMPLE_CONTENT = "Key: TEST-4\nSummary: test ticket\nPriority: High"

BASE_TIME = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeStore:
    """In-memory stand-in for IssueStore.

    ``reject`` decides, per batch call and item, whether the item comes back
    unprocessed. ``raise_on_batch_call`` makes the n-th batch call (0-based)
    raise. ``failing_puts`` lists issue ids whose single put raises.
    """

    table_name = "issues-test"

    def __init__(
        self,
        reject: Optional[Callable[[int, Dict[str, Any]], bool]] = None,
        raise_on_batch_call: Optional[Set[int]] = None,
        failing_puts: Optional[Set[str]] = None,
    ):
        self.reject = reject
        self.raise_on_batch_call = raise_on_batch_call or set()
        self.failing_puts = failing_puts or set()
        self.batch_calls: List[List[Dict[str, Any]]] = []
        self.puts: List[Dict[str, Any]] = []
        self.stored: Dict[Any, Dict[str, Any]] = {}
        self._lock = threading.Lock()

    def batch_put(self, items):
        call_index = len(self.batch_calls)
        self.batch_calls.append(list(items))
        if call_index in self.raise_on_batch_call:
            raise RuntimeError(f"batch call {call_index} exploded")

        unprocessed = []
        for item in items:
            if self.reject and self.reject(call_index, item):
                unprocessed.append(item)
            else:
                self.stored[item_key(item)] = item
        return unprocessed

    def put(self, item):
        with self._lock:
            self.puts.append(item)
        if item["issueId"] in self.failing_puts:
            raise RuntimeError(f"put rejected for {item['issueId']}")
        with self._lock:
            self.stored[item_key(item)] = item


class StepClock:
    """UTC clock that advances one millisecond per call."""

    def __init__(self, start: datetime = BASE_TIME):
        self.current = start

    def __call__(self) -> datetime:
        value = self.current
        self.current = self.current + timedelta(milliseconds=1)
        return value


def make_records(count: int, prefix: str = "ISSUE") -> List[IssueRecord]:
    return [
        IssueRecord(
            issue_id=f"{prefix}-{index}",
            timestamp=format_timestamp(BASE_TIME + timedelta(milliseconds=index)),
            title=f"Ticket {index}",
            content=f"Key: {prefix}-{index}",
            message_id=f"msg-{index}",
        )
        for index in range(count)
    ]


def queue_record(message_id: str, envelope: Dict[str, Any], wrap: bool = False) -> Dict[str, Any]:
    body: Dict[str, Any] = {"Message": json.dumps(envelope)} if wrap else envelope
    return {"messageId": message_id, "body": json.dumps(body)}
