"""Pytest configuration and fixtures."""

import asyncio
import json
import os

import pytest

# Set environment variables before imports
os.environ["TABLE_NAME"] = "contactflow-test"
os.environ["STAGE"] = "test"
os.environ["AWS_DEFAULT_REGION"] = "us-east-1"
os.environ["AWS_ACCESS_KEY_ID"] = "testing"
os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
os.environ["SES_FROM_EMAIL"] = "noreply@example.com"

from contactflow.channels.base import NotificationChannel, PersistenceChannel  # noqa: E402
from contactflow.config import ContactSettings  # noqa: E402
from contactflow.utils.exceptions import ChannelError  # noqa: E402


@pytest.fixture
def aws_credentials():
    """Mock AWS credentials for moto."""
    os.environ["AWS_ACCESS_KEY_ID"] = "testing"
    os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
    os.environ["AWS_SECURITY_TOKEN"] = "testing"
    os.environ["AWS_SESSION_TOKEN"] = "testing"
    os.environ["AWS_DEFAULT_REGION"] = "us-east-1"


@pytest.fixture
def dynamodb_table(aws_credentials):
    """Create mocked DynamoDB table."""
    import boto3
    from moto import mock_aws

    with mock_aws():
        dynamodb = boto3.resource("dynamodb", region_name="us-east-1")

        table = dynamodb.create_table(
            TableName="contactflow-test",
            KeySchema=[
                {"AttributeName": "PK", "KeyType": "HASH"},
                {"AttributeName": "SK", "KeyType": "RANGE"},
            ],
            AttributeDefinitions=[
                {"AttributeName": "PK", "AttributeType": "S"},
                {"AttributeName": "SK", "AttributeType": "S"},
                {"AttributeName": "GSI1PK", "AttributeType": "S"},
                {"AttributeName": "GSI1SK", "AttributeType": "S"},
            ],
            GlobalSecondaryIndexes=[
                {
                    "IndexName": "GSI1",
                    "KeySchema": [
                        {"AttributeName": "GSI1PK", "KeyType": "HASH"},
                        {"AttributeName": "GSI1SK", "KeyType": "RANGE"},
                    ],
                    "Projection": {"ProjectionType": "ALL"},
                },
            ],
            BillingMode="PAY_PER_REQUEST",
        )

        table.wait_until_exists()

        yield table


class FakePersistenceChannel(PersistenceChannel):
    """In-memory persistence channel with scripted behavior."""

    name = "fake_store"

    def __init__(self):
        self.calls = 0
        self.stored = []
        self.identifier = "abc123"
        self.error = None  # Raised as ChannelError
        self.exception = None  # Raised as-is
        self.delay = 0.0
        self.healthy = True

    async def store(self, submission):
        self.calls += 1
        self.stored.append(submission)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.exception is not None:
            raise self.exception
        if self.error is not None:
            raise ChannelError(self.name, self.error)
        return self.identifier

    async def health_check(self):
        if isinstance(self.healthy, Exception):
            raise self.healthy
        return self.healthy


class FakeNotificationChannel(NotificationChannel):
    """In-memory notification channel with scripted behavior.

    Each entry in ``script`` drives one call: an int is returned as the
    count, a str is raised as ChannelError, an exception is raised as-is.
    Once the script is used up, ``count`` is returned.
    """

    name = "fake_mailer"

    def __init__(self):
        self.calls = 0
        self.sent = []
        self.count = 2
        self.script = []
        self.delay = 0.0
        self.healthy = True

    async def deliver(self, submission):
        self.calls += 1
        self.sent.append(submission)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.script:
            step = self.script.pop(0)
            if isinstance(step, Exception):
                raise step
            if isinstance(step, str):
                raise ChannelError(self.name, step)
            return step
        return self.count

    async def health_check(self):
        if isinstance(self.healthy, Exception):
            raise self.healthy
        return self.healthy


@pytest.fixture
def persistence_channel():
    """Create a scripted persistence channel."""
    return FakePersistenceChannel()


@pytest.fixture
def notification_channel():
    """Create a scripted notification channel."""
    return FakeNotificationChannel()


@pytest.fixture
def settings():
    """Create settings with delivery enabled and short timeouts."""
    return ContactSettings(
        stage="test",
        simulate_delivery=False,
        simulated_latency_seconds=0,
        channel_timeout_seconds=1.0,
        support_email="help@example.com",
        table_name="contactflow-test",
    )


@pytest.fixture
def valid_submission():
    """Create a valid raw submission."""
    return {
        "name": "Jane Doe",
        "email": "jane@example.com",
        "company": "Acme Corp",
        "phone": "+1 (555) 123-4567",
        "service": "consulting",
        "message": "Hello, I would like to learn more about your services.",
    }


@pytest.fixture
def api_gateway_event():
    """Create a sample API Gateway event."""
    def _create_event(
        method: str = "GET",
        path: str = "/",
        body: dict | str | None = None,
        source_ip: str = "203.0.113.10",
        headers: dict | None = None,
    ):
        return {
            "httpMethod": method,
            "path": path,
            "pathParameters": {},
            "queryStringParameters": {},
            "body": body if isinstance(body, str) else (
                json.dumps(body) if body is not None else None
            ),
            "headers": {
                "Content-Type": "application/json",
                **(headers or {}),
            },
            "requestContext": {
                "identity": {"sourceIp": source_ip},
            },
        }

    return _create_event


class LambdaContext:
    """Mock Lambda context."""

    def __init__(self):
        self.function_name = "test-function"
        self.memory_limit_in_mb = 128
        self.invoked_function_arn = "arn:aws:lambda:us-east-1:123456789:function:test"
        self.aws_request_id = "test-request-id"

    def get_remaining_time_in_millis(self):
        return 30000


@pytest.fixture
def lambda_context():
    """Create a mock Lambda context."""
    return LambdaContext()
