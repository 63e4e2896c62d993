import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import asdict, dataclass, replace
from typing import Callable, Sequence

from repo_consumer.core.errors import DecodeError, HandlerError, TransportError
from repo_consumer.data_access.sqs import QueueClient
from repo_consumer.models.queue_message import RawMessage
from repo_consumer.services.dispatcher import Dispatcher

logger = logging.getLogger(__name__)

DEFAULT_MAX_MESSAGES = 10
DEFAULT_WAIT_SECONDS = 20
DEFAULT_BACKOFF_SECONDS = 5.0
# How often a pending receive checks for stop()
RECEIVE_CHECK_INTERVAL = 0.1


@dataclass
class ConsumerStats:
    received: int = 0
    handled: int = 0
    failed: int = 0
    deleted: int = 0
    delete_failed: int = 0
    receive_errors: int = 0


class ConsumptionLoop:
    """
    Receive -> dispatch -> delete, forever, until stop() is called.

    A message is deleted only after its own dispatch succeeded. Anything that
    goes wrong with one message is logged and the message is left on the
    queue, where the visibility timeout brings it back for another attempt.
    A failed receive puts the loop to sleep for `backoff_seconds` before
    polling again. stop() cuts that sleep short and abandons a receive that
    is still long-polling.
    """

    def __init__(
        self,
        queue: QueueClient,
        dispatcher: Dispatcher,
        max_messages: int = DEFAULT_MAX_MESSAGES,
        wait_seconds: int = DEFAULT_WAIT_SECONDS,
        backoff_seconds: float = DEFAULT_BACKOFF_SECONDS,
        concurrency: int = 1,
        stop_event: threading.Event | None = None,
        sleep: Callable[[float], bool | None] | None = None,
    ):
        self.queue = queue
        self.dispatcher = dispatcher
        self.max_messages = max_messages
        self.wait_seconds = wait_seconds
        self.backoff_seconds = backoff_seconds
        self.concurrency = max(1, concurrency)
        self._stop_event = stop_event if stop_event is not None else threading.Event()
        # Event.wait returns True as soon as stop() is called
        self._sleep = sleep if sleep is not None else self._stop_event.wait
        self._stats = ConsumerStats()
        self._stats_lock = threading.Lock()
        self._executor: ThreadPoolExecutor | None = None

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()

    @property
    def stats(self) -> ConsumerStats:
        with self._stats_lock:
            return replace(self._stats)

    def stop(self) -> None:
        self._stop_event.set()

    def run(self) -> None:
        logger.info("Starting SQS consumer...")
        if self.concurrency > 1:
            self._executor = ThreadPoolExecutor(
                max_workers=self.concurrency,
                thread_name_prefix="consumer"
            )

        try:
            while not self.stopped:
                self.poll_once()
        finally:
            if self._executor is not None:
                self._executor.shutdown(wait=True)
                self._executor = None
            logger.info(f"SQS consumer stopped: {asdict(self.stats)}")

    def poll_once(self) -> bool:
        """
        Runs a single receive and drains the batch, or backs off if the
        receive failed. Returns False once the loop has been stopped.
        """
        if self.stopped:
            return False

        try:
            batch = self._receive()
        except TransportError as e:
            logger.error(f"Error receiving messages: {e}", extra={"error": str(e)})
            return self._backoff()
        except Exception as e:
            logger.exception(f"Unexpected error receiving messages: {e}", extra={"error": str(e)})
            return self._backoff()

        if batch is None:
            return False

        self._drain(batch)
        return not self.stopped

    def _receive(self) -> Sequence[RawMessage] | None:
        """
        Runs the long-poll receive on a daemon thread so stop() does not have
        to wait for it. Returns None when the receive was abandoned; whatever
        it eventually returns stays invisible until the visibility timeout
        expires and is then redelivered.
        """
        outcome: dict = {}
        done = threading.Event()

        def receive():
            try:
                outcome["batch"] = self.queue.receive(self.max_messages, self.wait_seconds)
            except Exception as e:
                outcome["error"] = e
            finally:
                done.set()

        threading.Thread(target=receive, name="consumer-receive", daemon=True).start()

        while not done.wait(RECEIVE_CHECK_INTERVAL):
            if self.stopped:
                logger.info("Shutdown requested, abandoning pending receive")
                return None

        if "error" in outcome:
            raise outcome["error"]
        return outcome["batch"]

    def _backoff(self) -> bool:
        self._count("receive_errors")
        logger.info(f"Retrying receive in {self.backoff_seconds}s")
        interrupted = self._sleep(self.backoff_seconds)
        return not (interrupted or self.stopped)

    def _drain(self, batch: Sequence[RawMessage]) -> None:
        if not batch:
            return

        self._count("received", len(batch))
        logger.info(f"Received {len(batch)} messages.")

        if self._executor is not None:
            # map() re-raises worker exceptions; process_message never raises
            list(self._executor.map(self.process_message, batch))
        else:
            for message in batch:
                self.process_message(message)

    def process_message(self, message: RawMessage) -> bool:
        """
        Dispatches one message and deletes it if that worked.

        Returns True when the message was handled (whether or not the delete
        went through), False when it was skipped or failed.
        """
        extra = {"message_id": message.message_id, "receive_count": message.receive_count}

        if self.stopped:
            logger.info(f"Shutdown requested, leaving message {message.message_id} on the queue", extra=extra)
            return False

        try:
            outcome = self.dispatcher.dispatch(message.body)
        except DecodeError as e:
            self._count("failed")
            logger.error(f"Error decoding message: {message.message_id}", extra={**extra, "error": str(e)})
            return False
        except HandlerError as e:
            self._count("failed")
            logger.error(
                f"Error processing message: {message.message_id}",
                exc_info=e.cause,
                extra={**extra, "event": e.event, "error": str(e)}
            )
            return False
        except Exception as e:
            self._count("failed")
            logger.exception(f"Error processing message: {message.message_id}", extra={**extra, "error": str(e)})
            return False

        self._count("handled")
        logger.debug(f"Message {message.message_id} {outcome.value}", extra=extra)
        self._delete(message)
        return True

    def _delete(self, message: RawMessage) -> None:
        extra = {"message_id": message.message_id}
        try:
            self.queue.delete(message.receipt_handle)
        except Exception as e:
            self._count("delete_failed")
            logger.error(f"Error deleting message: {message.message_id}", extra={**extra, "error": str(e)})
            return

        self._count("deleted")
        logger.info(f"Successfully deleted message: {message.message_id}", extra=extra)

    def _count(self, name: str, amount: int = 1) -> None:
        with self._stats_lock:
            setattr(self._stats, name, getattr(self._stats, name) + amount)
