"""Pytest configuration and shared fixtures."""

from unittest.mock import MagicMock

import boto3
import pytest
from moto import mock_aws

from repo_consumer.core.config import get_settings
from repo_consumer.core.dependencies import get_boto_session, get_publisher, get_queue_client

QUEUE_NAME = "repo-events"
REGION = "us-east-1"


@pytest.fixture(autouse=True)
def clear_caches():
    """Drop cached settings and clients so each test sees its own environment."""
    for factory in (get_settings, get_boto_session, get_queue_client, get_publisher):
        factory.cache_clear()
    yield
    for factory in (get_settings, get_boto_session, get_queue_client, get_publisher):
        factory.cache_clear()


@pytest.fixture
def aws_credentials(monkeypatch):
    """Fake credentials so boto3 never reaches for real ones."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", REGION)
    monkeypatch.setenv("AWS_REGION", REGION)
    monkeypatch.delenv("AWS_ENDPOINT_URL", raising=False)


@pytest.fixture
def sqs(aws_credentials):
    """Yield a moto-backed SQS client and the URL of a fresh queue."""
    with mock_aws():
        client = boto3.client("sqs", region_name=REGION)
        queue_url = client.create_queue(QueueName=QUEUE_NAME)["QueueUrl"]
        yield client, queue_url


@pytest.fixture
def queue():
    """In-memory stand-in for the queue client."""
    fake = MagicMock()
    fake.receive.return_value = []
    return fake
