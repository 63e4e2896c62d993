"""Tests for wiring the consumer from settings."""

from repo_consumer.core.dependencies import get_consumer, get_publisher, get_queue_client
from repo_consumer.services.event_handlers import LoggingEventHandlers

from helpers import RecordingHandlers, make_envelope


class TestDependencies:
    def test_consumer_built_from_settings(self, sqs, monkeypatch):
        _, queue_url = sqs
        monkeypatch.setenv("AWS_QUEUE_URL", queue_url)
        monkeypatch.setenv("MAX_MESSAGES", "3")
        monkeypatch.setenv("WAIT_TIME_SECONDS", "0")
        monkeypatch.setenv("BACKOFF_SECONDS", "1.5")
        monkeypatch.setenv("VISIBILITY_TIMEOUT", "60")

        consumer = get_consumer()

        assert consumer.max_messages == 3
        assert consumer.wait_seconds == 0
        assert consumer.backoff_seconds == 1.5
        assert consumer.queue is get_queue_client()
        assert consumer.queue.queue_url == queue_url
        assert consumer.queue.visibility_timeout == 60
        assert isinstance(consumer.dispatcher.handlers, LoggingEventHandlers)

    def test_custom_handlers_receive_published_events(self, sqs, monkeypatch):
        _, queue_url = sqs
        monkeypatch.setenv("AWS_QUEUE_URL", queue_url)
        monkeypatch.setenv("WAIT_TIME_SECONDS", "0")
        handlers = RecordingHandlers()

        get_publisher().publish(make_envelope("repository_added"))
        get_consumer(handlers).poll_once()

        assert [c[0] for c in handlers.calls] == ["repository_added"]
