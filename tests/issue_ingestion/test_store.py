import pytest
from botocore.exceptions import ClientError

from src.functions.issue_ingestion.core.db import FallbackWriter, IssueStore
from src.functions.issue_ingestion.core.errors import StoreWriteError

from tests.issue_ingestion.fixtures import make_records


class FakeClient:
    def __init__(self, resource):
        self.resource = resource

    def put_item(self, TableName, Item):
        if self.resource.error:
            raise self.resource.error
        self.resource.put_items.append((TableName, Item))


class FakeResource:
    def __init__(self, response=None, error=None):
        self.response = response or {}
        self.error = error
        self.requests = []
        self.put_items = []
        self.meta = type("Meta", (), {"client": FakeClient(self)})()

    def batch_write_item(self, RequestItems):
        self.requests.append(RequestItems)
        if self.error:
            raise self.error
        return self.response

    def Table(self, name):
        raise AssertionError("single puts must go through meta.client")


def _throttled(operation):
    return ClientError(
        {"Error": {"Code": "ProvisionedThroughputExceededException", "Message": "slow down"}},
        operation,
    )


def test_batch_put_builds_put_requests_and_returns_unprocessed():
    leftover = {"issueId": "A-2", "timestamp": "t2"}
    resource = FakeResource(
        response={"UnprocessedItems": {"issues": [{"PutRequest": {"Item": leftover}}]}}
    )
    store = IssueStore("issues", resource=resource)

    unprocessed = store.batch_put([{"issueId": "A-1", "timestamp": "t1"}, leftover])

    assert resource.requests == [
        {
            "issues": [
                {"PutRequest": {"Item": {"issueId": "A-1", "timestamp": "t1"}}},
                {"PutRequest": {"Item": leftover}},
            ]
        }
    ]
    assert unprocessed == [leftover]


def test_batch_put_returns_empty_when_everything_processed():
    store = IssueStore("issues", resource=FakeResource(response={"UnprocessedItems": {}}))

    assert store.batch_put([{"issueId": "A-1", "timestamp": "t1"}]) == []


def test_batch_put_wraps_client_errors():
    store = IssueStore("issues", resource=FakeResource(error=_throttled("BatchWriteItem")))

    with pytest.raises(StoreWriteError) as excinfo:
        store.batch_put([{"issueId": "A-1", "timestamp": "t1"}])

    assert excinfo.value.issue_ids == ["A-1"]
    assert "ProvisionedThroughputExceededException" in str(excinfo.value)


def test_put_goes_through_client_with_table_name():
    resource = FakeResource()
    store = IssueStore("issues", resource=resource)

    store.put({"issueId": "A-1", "timestamp": "t1"})

    assert resource.put_items == [("issues", {"issueId": "A-1", "timestamp": "t1"})]


def test_put_wraps_client_errors():
    store = IssueStore("issues", resource=FakeResource(error=_throttled("PutItem")))

    with pytest.raises(StoreWriteError) as excinfo:
        store.put({"issueId": "A-1", "timestamp": "t1"})

    assert excinfo.value.issue_ids == ["A-1"]


def test_fallback_workers_share_the_client_only():
    resource = FakeResource()
    store = IssueStore("issues", resource=resource)
    records = make_records(6)

    outcome = FallbackWriter(store, max_workers=3).write(records)

    assert outcome.successful == 6
    assert sorted(item["issueId"] for _, item in resource.put_items) == sorted(r.issue_id for r in records)
    assert {table for table, _ in resource.put_items} == {"issues"}
