"""Contact submission repository for DynamoDB operations."""

from contactflow.models.submission import SubmissionRecord
from contactflow.repositories.base import BaseRepository

SUBMISSIONS_PK = "CONTACT#SUBMISSIONS"


class SubmissionRepository(BaseRepository[SubmissionRecord]):
    """Repository for SubmissionRecord entities."""

    def __init__(self, table_name: str | None = None, region_name: str | None = None):
        """Initialize submission repository."""
        super().__init__(SubmissionRecord, table_name, region_name)

    def get_by_id(self, submission_id: str) -> SubmissionRecord | None:
        """Get a submission by ID."""
        return self.get(pk=SUBMISSIONS_PK, sk=f"SUB#{submission_id}")

    def create_submission(self, record: SubmissionRecord) -> SubmissionRecord:
        """Create a new submission record.

        Args:
            record: The record to store.

        Returns:
            The stored record.

        Raises:
            ConflictError: If a record with the same ID already exists.
        """
        return self.create(record, gsi_keys=record.get_gsi1_keys())

    def list_recent(
        self,
        limit: int = 50,
        last_key: dict | None = None,
    ) -> tuple[list[SubmissionRecord], dict | None]:
        """List submissions newest first.

        Returns:
            Tuple of (records, next_page_key).
        """
        return self.query(
            pk=SUBMISSIONS_PK,
            sk_prefix="SUB#",
            limit=limit,
            newest_first=True,
            start_key=last_key,
        )

    def list_by_email(self, email: str, limit: int = 20) -> list[SubmissionRecord]:
        """List submissions sent from an email address, newest first."""
        records, _ = self.query(
            pk=f"EMAIL#{email.lower()}",
            sk_prefix="SUB#",
            index_name="GSI1",
            limit=limit,
            newest_first=True,
        )
        return records
