"""Base model for entities stored in DynamoDB."""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Self

from pydantic import BaseModel as PydanticBaseModel, ConfigDict, Field
from ulid import ULID

KEY_ATTRIBUTES = frozenset({"PK", "SK", "GSI1PK", "GSI1SK"})


def generate_ulid() -> str:
    """Generate a new ULID string (sortable by creation time)."""
    return str(ULID())


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)


def _to_attribute(value: Any) -> Any:
    # DynamoDB rejects floats and empty attributes
    if isinstance(value, dict):
        return {k: _to_attribute(v) for k, v in value.items() if v is not None}
    if isinstance(value, list):
        return [_to_attribute(v) for v in value]
    if isinstance(value, float):
        return Decimal(str(value))
    return value


def _from_attribute(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: _from_attribute(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_from_attribute(v) for v in value]
    if isinstance(value, Decimal):
        return int(value) if value % 1 == 0 else float(value)
    return value


class BaseModel(PydanticBaseModel):
    """Stored entity with a ULID and created/updated timestamps.

    Subclasses define get_pk() and get_sk().
    """

    model_config = ConfigDict(
        populate_by_name=True,
        use_enum_values=True,
        validate_assignment=True,
    )

    id: str = Field(default_factory=generate_ulid)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def to_dynamodb(self) -> dict[str, Any]:
        """Serialize to a DynamoDB item (without key attributes)."""
        return _to_attribute(self.model_dump(mode="json", by_alias=True))

    @classmethod
    def from_dynamodb(cls, item: dict[str, Any]) -> Self:
        """Build a model from a DynamoDB item, ignoring key attributes."""
        return cls.model_validate(
            {k: _from_attribute(v) for k, v in item.items() if k not in KEY_ATTRIBUTES}
        )

    def get_pk(self) -> str:
        raise NotImplementedError("Subclasses must implement get_pk()")

    def get_sk(self) -> str:
        raise NotImplementedError("Subclasses must implement get_sk()")

    def get_keys(self) -> dict[str, str]:
        """Get both PK and SK as a dictionary."""
        return {"PK": self.get_pk(), "SK": self.get_sk()}

    def update_timestamp(self) -> None:
        self.updated_at = utc_now()
