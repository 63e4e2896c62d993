import logging
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type, before_sleep_log

from repo_consumer.core.errors import TransportError
from repo_consumer.data_access.sqs import QueueClient
from repo_consumer.models.queue_message import Envelope

logger = logging.getLogger(__name__)

MESSAGE_TYPE = "RepositoryEvent"

class EventPublisher:
    def __init__(self, queue: QueueClient):
        self.queue = queue

    @retry(
        wait=wait_exponential(multiplier=1, min=1, max=60),
        stop=stop_after_attempt(3),
        retry=retry_if_exception_type(TransportError),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True
    )
    def publish(self, envelope: Envelope) -> str:
        message_id = self.queue.send(
            envelope.to_wire(),
            attributes={"MessageType": MESSAGE_TYPE}
        )
        logger.info(
            f"Message sent to SQS queue successfully: {message_id}",
            extra={"message_id": message_id, "event": envelope.event}
        )
        return message_id
