"""DynamoDB-backed persistence channel."""

import asyncio

import structlog
from botocore.exceptions import BotoCoreError, ClientError

from contactflow.channels.base import PersistenceChannel
from contactflow.models.submission import ContactSubmission, SubmissionRecord
from contactflow.repositories.submission import SubmissionRepository
from contactflow.utils.exceptions import ChannelError, ConflictError

logger = structlog.get_logger()


class DynamoDBPersistenceChannel(PersistenceChannel):
    """Stores submissions in the DynamoDB table.

    boto3 is blocking, so repository calls run in a worker thread.
    """

    name = "dynamodb"

    def __init__(
        self,
        repository: SubmissionRepository | None = None,
        verify_connection: bool = True,
    ):
        """Initialize the channel.

        Args:
            repository: Submission repository. Defaults to one on TABLE_NAME.
            verify_connection: Check the table before each write.
        """
        self.repository = repository or SubmissionRepository()
        self.verify_connection = verify_connection
        self.logger = logger.bind(service="dynamodb_persistence")

    async def health_check(self) -> bool:
        """Check that the table exists and is ACTIVE."""
        try:
            status = await asyncio.to_thread(self.repository.table_status)
        except (ClientError, BotoCoreError) as e:
            self.logger.warning("DynamoDB health check failed", error=str(e))
            return False
        return status == "ACTIVE"

    async def store(self, submission: ContactSubmission) -> str:
        """Write a new submission record.

        Raises:
            ChannelError: If the table is unreachable or the write fails.
        """
        if self.verify_connection and not await self.health_check():
            raise ChannelError(self.name, "Database connection failed")

        record = SubmissionRecord.from_submission(submission)
        try:
            await asyncio.to_thread(self.repository.create_submission, record)
        except ConflictError as e:
            raise ChannelError(self.name, f"Duplicate submission id: {e.message}") from e
        except (ClientError, BotoCoreError) as e:
            raise ChannelError(self.name, f"Database save failed: {e}") from e

        return record.id
