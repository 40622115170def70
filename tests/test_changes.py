import json

import pytest

from zesty.changes import ChangeFeed, parse_notification


@pytest.fixture
def feed(monkeypatch):
    monkeypatch.setattr(ChangeFeed, "_ensure_listener", lambda self: None)
    return ChangeFeed(dsn="postgresql://unused")


def test_parse_notification():
    payload = json.dumps({"table": "incidents", "type": "update", "id": 4})
    assert parse_notification(payload) == {"table": "incidents", "type": "UPDATE", "id": 4}


def test_malformed_notifications_are_ignored():
    assert parse_notification("not json") is None
    assert parse_notification(json.dumps({"type": "INSERT"})) is None
    assert parse_notification(json.dumps([1, 2])) is None


def test_dispatch_reaches_only_matching_table(feed):
    incidents, messages = [], []
    feed.subscribe("incidents", incidents.append)
    feed.subscribe("messages", messages.append)

    feed.dispatch({"table": "incidents", "type": "INSERT", "id": 1})

    assert incidents == [{"table": "incidents", "type": "INSERT", "id": 1}]
    assert messages == []


def test_unsubscribe_is_idempotent(feed):
    received = []
    unsubscribe = feed.subscribe("incidents", received.append)
    feed.subscribe("incidents", lambda change: None)
    assert feed.subscriber_count("incidents") == 2

    unsubscribe()
    unsubscribe()

    assert feed.subscriber_count("incidents") == 1
    feed.dispatch({"table": "incidents", "type": "DELETE", "id": 2})
    assert received == []


def test_failing_subscriber_does_not_block_others(feed):
    received = []

    def broken(change):
        raise RuntimeError("boom")

    feed.subscribe("messages", broken)
    feed.subscribe("messages", received.append)

    feed.dispatch({"table": "messages", "type": "INSERT", "id": 9})

    assert len(received) == 1


def test_subscriber_count_totals(feed):
    feed.subscribe("incidents", lambda change: None)
    feed.subscribe("shifts", lambda change: None)
    assert feed.subscriber_count() == 2
    assert feed.subscriber_count("profiles") == 0
