import boto3
from functools import lru_cache

from repo_consumer.core.config import get_settings
from repo_consumer.data_access.sqs import SqsQueueClient
from repo_consumer.services.consumer import ConsumptionLoop
from repo_consumer.services.dispatcher import Dispatcher
from repo_consumer.services.event_handlers import EventHandlers
from repo_consumer.services.publisher import EventPublisher


@lru_cache()
def get_boto_session() -> boto3.Session:
    # Credentials come from the standard environment chain
    return boto3.Session(region_name=get_settings().AWS_REGION)

@lru_cache()
def get_queue_client() -> SqsQueueClient:
    settings = get_settings()
    session = get_boto_session()
    sqs_client = session.client('sqs', endpoint_url=settings.AWS_ENDPOINT_URL)
    return SqsQueueClient(
        client=sqs_client,
        queue_url=settings.AWS_QUEUE_URL,
        visibility_timeout=settings.VISIBILITY_TIMEOUT
    )

@lru_cache()
def get_publisher() -> EventPublisher:
    return EventPublisher(queue=get_queue_client())

def get_consumer(handlers: EventHandlers | None = None) -> ConsumptionLoop:
    settings = get_settings()
    return ConsumptionLoop(
        queue=get_queue_client(),
        dispatcher=Dispatcher(handlers),
        max_messages=settings.MAX_MESSAGES,
        wait_seconds=settings.WAIT_TIME_SECONDS,
        backoff_seconds=settings.BACKOFF_SECONDS,
        concurrency=settings.WORKER_CONCURRENCY
    )
