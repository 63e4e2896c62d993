"""Builders for queue payloads used across the test suite."""

import json
from typing import Any

from repo_consumer.models.queue_message import Envelope, RawMessage, RepositoryRef
from repo_consumer.services.event_handlers import LoggingEventHandlers


def repository_payload(**overrides: Any) -> dict[str, Any]:
    payload = {
        "id": 42,
        "name": "widgets",
        "full_name": "acme/widgets",
        "url": "https://github.com/acme/widgets",
        "description": "Widget factory",
    }
    payload.update(overrides)
    return payload


def envelope_body(event: str = "push", **overrides: Any) -> str:
    payload = {
        "event": event,
        "message": f"{event} happened",
        "timestamp": "2024-05-01T12:00:00Z",
        "sender": "octocat",
        "repository": repository_payload(),
    }
    payload.update(overrides)
    return json.dumps(payload)


def raw_message(index: int, body: str | None = None, receive_count: int = 1) -> RawMessage:
    return RawMessage(
        message_id=f"msg-{index}",
        receipt_handle=f"handle-{index}",
        body=body if body is not None else envelope_body(),
        attributes={"ApproximateReceiveCount": str(receive_count)},
    )


def make_envelope(event: str = "push", **overrides: Any) -> Envelope:
    fields = {
        "event": event,
        "message": "hello",
        "sender": "octocat",
        "repository": RepositoryRef(id=42, name="widgets", full_name="acme/widgets"),
    }
    fields.update(overrides)
    return Envelope(**fields)


class RecordingHandlers(LoggingEventHandlers):
    """Handler set that remembers what it was given instead of logging."""

    def __init__(self, fail_on: set[str] | None = None):
        self.calls: list[tuple[str, Envelope, RepositoryRef | None]] = []
        self.fail_on = fail_on or set()

    def _record(self, name: str, envelope: Envelope, repository: RepositoryRef | None) -> None:
        if name in self.fail_on:
            raise RuntimeError(f"{name} handler exploded")
        self.calls.append((name, envelope, repository))

    def on_repository_added(self, envelope, repository):
        self._record("repository_added", envelope, repository)

    def on_push(self, envelope, repository):
        self._record("push", envelope, repository)

    def on_pull_request(self, envelope, repository):
        self._record("pull_request", envelope, repository)
