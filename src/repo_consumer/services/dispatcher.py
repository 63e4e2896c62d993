import logging
from enum import Enum
from pydantic import ValidationError

from repo_consumer.core.errors import DecodeError, HandlerError
from repo_consumer.models.queue_message import Envelope
from repo_consumer.services.event_handlers import EventHandlers, EventType, LoggingEventHandlers

logger = logging.getLogger(__name__)


class DispatchOutcome(str, Enum):
    HANDLED = "handled"
    UNHANDLED = "unhandled"


class Dispatcher:
    def __init__(self, handlers: EventHandlers | None = None):
        self.handlers = handlers if handlers is not None else LoggingEventHandlers()

    @staticmethod
    def decode(body: str | bytes) -> Envelope:
        try:
            return Envelope.model_validate_json(body)
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or 'body'}: {err['msg']}"
                for err in e.errors()
            )
            raise DecodeError(f"Malformed envelope ({problems})") from e

    @staticmethod
    def route(envelope: Envelope) -> EventType | None:
        try:
            return EventType(envelope.event)
        except ValueError:
            return None

    def dispatch(self, body: str | bytes) -> DispatchOutcome:
        """
        Decodes a raw message body and hands it to the matching handler.

        Raises DecodeError for a malformed body and HandlerError when the
        handler fails. Unknown event tags count as consumed.
        """
        envelope = self.decode(body)
        return self.dispatch_envelope(envelope)

    def dispatch_envelope(self, envelope: Envelope) -> DispatchOutcome:
        event_type = self.route(envelope)

        if event_type is None:
            logger.warning(f"Unhandled event type: {envelope.event}", extra={"event": envelope.event})
            return DispatchOutcome.UNHANDLED

        logger.info(f"Processing message: {envelope!r}", extra={"event": envelope.event})
        try:
            self.handlers.handle(event_type, envelope)
        except Exception as e:
            raise HandlerError(envelope.event, e) from e

        return DispatchOutcome.HANDLED
