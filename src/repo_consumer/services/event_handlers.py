import logging
from enum import Enum
from typing import Protocol

from repo_consumer.models.queue_message import Envelope, RepositoryRef

logger = logging.getLogger(__name__)


class EventType(str, Enum):
    REPOSITORY_ADDED = "repository_added"
    PUSH = "push"
    PULL_REQUEST = "pull_request"


class EventHandlers(Protocol):
    """
    Anything the dispatcher can hand a routed envelope to. Raising signals
    failure and leaves the message on the queue for redelivery.
    """
    def handle(self, event: EventType, envelope: Envelope) -> None: ...


class LoggingEventHandlers:
    """
    Default handler set: logs the interesting fields of each event.

    Subclass and override the on_* methods to plug in real processing.
    """

    def handle(self, event: EventType | str, envelope: Envelope) -> None:
        handlers = {
            EventType.REPOSITORY_ADDED: self.on_repository_added,
            EventType.PUSH: self.on_push,
            EventType.PULL_REQUEST: self.on_pull_request,
        }
        handlers[EventType(event)](envelope, envelope.repository)

    def on_repository_added(self, envelope: Envelope, repository: RepositoryRef | None) -> None:
        logger.info(f"New repository added: {repository}", extra={"event": envelope.event})
        logger.info(f"Message details: {envelope.message}", extra={"event": envelope.event})

    def on_push(self, envelope: Envelope, repository: RepositoryRef | None) -> None:
        full_name = repository.full_name if repository else None
        logger.info(f"Push event received for repository: {full_name}", extra={"event": envelope.event})
        logger.info(f"Sender: {envelope.sender}", extra={"event": envelope.event})
        logger.info(f"Message: {envelope.message}", extra={"event": envelope.event})

    def on_pull_request(self, envelope: Envelope, repository: RepositoryRef | None) -> None:
        full_name = repository.full_name if repository else None
        logger.info(
            f"Pull request event for repository: {full_name}",
            extra={"event": envelope.event, "action": envelope.action}
        )
        logger.info(f"Action: {envelope.action}", extra={"event": envelope.event})
        logger.info(f"Sender: {envelope.sender}", extra={"event": envelope.event})
        logger.info(f"Message: {envelope.message}", extra={"event": envelope.event})
