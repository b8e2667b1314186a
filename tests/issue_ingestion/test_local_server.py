import json

import pytest

from src.functions.issue_ingestion.core.pipelines import ingestion_pipeline
from src.functions.issue_ingestion.functions import local_server, main

from tests.issue_ingestion.fixtures import SAMPLE_CONTENT, FakeStore


@pytest.fixture
def client(monkeypatch):
    store = FakeStore()
    monkeypatch.setattr(ingestion_pipeline, "IssueStore", lambda table_name, dynamo_config=None: store)
    monkeypatch.setattr(main, "_config", None)
    monkeypatch.setenv("DYNAMODB_TABLE", store.table_name)
    monkeypatch.delenv("ENVELOPE_UNWRAP", raising=False)
    local_server.app.config["TESTING"] = True
    with local_server.app.test_client() as test_client:
        test_client.store = store
        yield test_client


def test_event_from_payload_wraps_bare_envelope_in_message():
    event = local_server.event_from_payload({"title": "Ticket", "content": SAMPLE_CONTENT}, "message")

    (record,) = event["Records"]
    body = json.loads(record["body"])
    assert json.loads(body["Message"])["title"] == "Ticket"
    assert record["messageId"]


def test_event_from_payload_passes_queue_events_through():
    event = {"Records": [{"messageId": "m-1", "body": "{}"}]}

    assert local_server.event_from_payload(event, "message") is event


def test_post_bare_envelope_persists_issue(client):
    response = client.post("/", json={"title": "Ticket", "content": SAMPLE_CONTENT})
    body = response.get_json()

    assert response.status_code == 200
    assert body["status"] == "success"
    assert body["batchItemFailures"] == []
    (item,) = client.store.stored.values()
    assert item["issueId"] == "TEST-4"
    assert item["summary"] == "test ticket"


def test_post_rejects_non_json(client):
    response = client.post("/", data="plain text", content_type="text/plain")

    assert response.status_code == 400


def test_post_reports_configuration_error(client, monkeypatch):
    monkeypatch.setattr(main, "_config", None)
    monkeypatch.delenv("DYNAMODB_TABLE", raising=False)

    response = client.post("/", json={"title": "Ticket", "content": SAMPLE_CONTENT})

    assert response.status_code == 500
    assert "DYNAMODB_TABLE" in response.get_json()["message"]


def test_health(client):
    response = client.get("/health")

    assert response.get_json() == {"status": "healthy", "service": "issue_ingestion"}
