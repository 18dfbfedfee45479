import os
import sys

import pytest
import requests

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
import events
from db import NotificationRepository
from events import (
    CompositePublisher,
    NotificationPublisher,
    WebhookPublisher,
    publish_safely,
)


class Recorder:
    def __init__(self):
        self.calls = []

    def publish(self, user_id, event_name, payload):
        self.calls.append((user_id, event_name, payload))


class Broken:
    def publish(self, user_id, event_name, payload):
        raise RuntimeError("unavailable")


class FakeResponse:
    def __init__(self, status_code=200):
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


def test_publish_safely_swallows_errors(caplog):
    assert publish_safely(Broken(), "u1", "prAchieved", {}) is False
    assert "failed to publish prAchieved" in caplog.text
    assert publish_safely(None, "u1", "prAchieved", {}) is False
    recorder = Recorder()
    assert publish_safely(recorder, "u1", "prAchieved", {"value": 1}) is True
    assert recorder.calls == [("u1", "prAchieved", {"value": 1})]


def test_composite_isolates_publishers():
    recorder = Recorder()
    CompositePublisher([Broken(), recorder]).publish("u1", "finisherAssigned", {"session_id": 1})
    assert recorder.calls == [("u1", "finisherAssigned", {"session_id": 1})]


def test_notification_publisher(tmp_path):
    repo = NotificationRepository(str(tmp_path / "n.db"))
    NotificationPublisher(repo).publish("u1", "prAchieved", {"exercise": "Squat"})
    rows = repo.fetch_all("u1")
    assert rows[0]["event"] == "prAchieved"
    assert rows[0]["payload"] == {"exercise": "Squat"}


def test_webhook_publisher(monkeypatch):
    sent = {}

    def fake_post(url, json=None, headers=None, timeout=None):
        sent.update(url=url, json=json, headers=headers, timeout=timeout)
        return FakeResponse()

    monkeypatch.setattr(events.requests, "post", fake_post)
    WebhookPublisher("https://hooks.example.com/e", token="t0k", timeout=2.0).publish(
        "u1", "finisherAssigned", {"session_id": 3, "protocol_id": 1}
    )
    assert sent["url"] == "https://hooks.example.com/e"
    assert sent["json"]["event"] == "finisherAssigned"
    assert sent["headers"]["Authorization"] == "Bearer t0k"
    assert sent["timeout"] == 2.0


def test_webhook_publisher_raises_on_http_error(monkeypatch):
    monkeypatch.setattr(events.requests, "post", lambda *a, **k: FakeResponse(502))
    with pytest.raises(requests.HTTPError):
        WebhookPublisher("https://hooks.example.com/e").publish("u1", "prAchieved", {})
