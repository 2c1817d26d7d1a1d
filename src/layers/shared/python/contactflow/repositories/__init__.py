"""Repository classes for DynamoDB data access."""

from contactflow.repositories.base import BaseRepository
from contactflow.repositories.submission import SubmissionRepository

__all__ = [
    "BaseRepository",
    "SubmissionRepository",
]
