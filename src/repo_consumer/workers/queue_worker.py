import logging
import signal
import sys

from repo_consumer.core.config import get_settings
from repo_consumer.core.dependencies import get_consumer
from repo_consumer.core.errors import ConfigError
from repo_consumer.core.logging_config import configure_logging, shutdown_logging

logger = logging.getLogger(__name__)

def main() -> int:
    # Workers are entry points, so logging is configured here
    configure_logging()

    try:
        settings = get_settings()
    except ConfigError as e:
        logger.critical(f"Refusing to start: {e}", extra={"error": ", ".join(e.keys)})
        shutdown_logging()
        return 1

    configure_logging(settings.LOG_LEVEL)
    consumer = get_consumer()

    def request_stop(signum, frame):
        logger.info(f"Received {signal.Signals(signum).name}, shutting down")
        consumer.stop()

    signal.signal(signal.SIGTERM, request_stop)
    signal.signal(signal.SIGINT, request_stop)

    logger.info("Consumer configured", extra={"queue_url": settings.AWS_QUEUE_URL})
    try:
        consumer.run()
    finally:
        shutdown_logging()
    return 0

if __name__ == "__main__":
    sys.exit(main())
