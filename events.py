"""Event publishers for engine notifications.

Publishing is best-effort: a failed notification must never undo the data
write that triggered it, so services go through :func:`publish_safely`.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Protocol

import requests

from db import NotificationRepository

logger = logging.getLogger(__name__)

FINISHER_ASSIGNED = "finisherAssigned"
PR_ACHIEVED = "prAchieved"


class EventPublisher(Protocol):
    def publish(self, user_id: str, event_name: str, payload: dict) -> None:
        ...


class NotificationPublisher:
    """Store events in the notifications table."""

    def __init__(self, repo: NotificationRepository) -> None:
        self.repo = repo

    def publish(self, user_id: str, event_name: str, payload: dict) -> None:
        self.repo.add(user_id, event_name, payload)


class WebhookPublisher:
    """POST events as JSON to an HTTP endpoint."""

    def __init__(self, url: str, token: Optional[str] = None, timeout: float = 5.0) -> None:
        self.url = url
        self.token = token
        self.timeout = timeout

    def publish(self, user_id: str, event_name: str, payload: dict) -> None:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        resp = requests.post(
            self.url,
            json={"user_id": user_id, "event": event_name, "payload": payload},
            headers=headers,
            timeout=self.timeout,
        )
        resp.raise_for_status()


class CompositePublisher:
    """Fan an event out to several publishers.

    A failing publisher does not stop the rest.
    """

    def __init__(self, publishers: Iterable[EventPublisher]) -> None:
        self.publishers = list(publishers)

    def publish(self, user_id: str, event_name: str, payload: dict) -> None:
        for publisher in self.publishers:
            publish_safely(publisher, user_id, event_name, payload)


def publish_safely(
    publisher: Optional[EventPublisher], user_id: str, event_name: str, payload: dict
) -> bool:
    """Publish and report success; failures are logged, never raised."""
    if publisher is None:
        return False
    try:
        publisher.publish(user_id, event_name, payload)
    except Exception:
        logger.exception("failed to publish %s for user %s", event_name, user_id)
        return False
    return True
