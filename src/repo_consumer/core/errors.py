"""Error taxonomy for the queue consumer.

Only ConfigError is allowed to escape to the process entry point; the
others are raised by collaborators and contained by the consumption loop.
"""


class ConsumerError(Exception):
    """Base class for all consumer errors."""


class ConfigError(ConsumerError):
    """Required configuration is missing or invalid at startup."""

    def __init__(self, message: str, keys: list[str] | None = None):
        super().__init__(message)
        self.keys = keys or []


class TransportError(ConsumerError):
    """The queue service could not be reached or rejected a call."""

    def __init__(self, operation: str, message: str):
        super().__init__(f"{operation} failed: {message}")
        self.operation = operation


class DecodeError(ConsumerError):
    """A message body is not a well-formed envelope."""


class HandlerError(ConsumerError):
    """An event handler raised while processing an envelope."""

    def __init__(self, event: str, cause: Exception):
        super().__init__(f"Handler for '{event}' failed: {cause}")
        self.event = event
        self.cause = cause
