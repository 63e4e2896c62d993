import logging
from typing import Any, Protocol, Sequence
from botocore.exceptions import BotoCoreError, ClientError

from repo_consumer.core.errors import TransportError
from repo_consumer.models.queue_message import RawMessage

logger = logging.getLogger(__name__)


class QueueClient(Protocol):
    def receive(self, max_messages: int, wait_seconds: int) -> Sequence[RawMessage]: ...

    def delete(self, receipt_handle: str) -> None: ...

    def send(self, body: str, attributes: dict[str, str] | None = None) -> str: ...


def _describe(e: Exception) -> str:
    if isinstance(e, ClientError):
        error = e.response.get("Error", {})
        return f"{error.get('Code', 'Unknown')}: {error.get('Message', str(e))}"
    return str(e)


class SqsQueueClient:
    def __init__(self, client, queue_url: str, visibility_timeout: int | None = None):
        self.sqs_client = client
        self.queue_url = queue_url
        self.visibility_timeout = visibility_timeout

    def receive(self, max_messages: int, wait_seconds: int) -> list[RawMessage]:
        params: dict[str, Any] = {
            "QueueUrl": self.queue_url,
            "MaxNumberOfMessages": max_messages,
            "WaitTimeSeconds": wait_seconds,
            "AttributeNames": ["All"],
            "MessageAttributeNames": ["All"],
        }
        if self.visibility_timeout is not None:
            params["VisibilityTimeout"] = self.visibility_timeout

        try:
            response = self.sqs_client.receive_message(**params)
        except (ClientError, BotoCoreError) as e:
            raise TransportError("receive", _describe(e)) from e

        return [self._to_raw_message(m) for m in response.get("Messages", [])]

    def delete(self, receipt_handle: str) -> None:
        try:
            self.sqs_client.delete_message(
                QueueUrl=self.queue_url,
                ReceiptHandle=receipt_handle
            )
        except (ClientError, BotoCoreError) as e:
            raise TransportError("delete", _describe(e)) from e

    def send(self, body: str, attributes: dict[str, str] | None = None) -> str:
        params: dict[str, Any] = {
            "QueueUrl": self.queue_url,
            "MessageBody": body,
        }
        if attributes:
            params["MessageAttributes"] = {
                key: {"DataType": "String", "StringValue": value}
                for key, value in attributes.items()
            }

        try:
            response = self.sqs_client.send_message(**params)
        except (ClientError, BotoCoreError) as e:
            raise TransportError("send", _describe(e)) from e

        return response["MessageId"]

    @staticmethod
    def _to_raw_message(message: dict) -> RawMessage:
        message_attributes = {
            key: value.get("StringValue", value.get("BinaryValue"))
            for key, value in message.get("MessageAttributes", {}).items()
        }
        return RawMessage(
            message_id=message["MessageId"],
            receipt_handle=message["ReceiptHandle"],
            body=message.get("Body", ""),
            attributes=message.get("Attributes", {}),
            message_attributes=message_attributes,
        )
