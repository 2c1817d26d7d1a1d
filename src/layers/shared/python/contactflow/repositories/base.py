"""DynamoDB access shared by repositories.

Entities live in one table keyed by PK/SK with an optional GSI1
(GSI1PK/GSI1SK) for secondary lookups.
"""

import os
from typing import Any, Generic, TypeVar

import boto3
import structlog
from botocore.exceptions import ClientError

from contactflow.models.base import BaseModel
from contactflow.utils.exceptions import ConflictError

logger = structlog.get_logger()

T = TypeVar("T", bound=BaseModel)

INDEX_KEYS = {
    None: ("PK", "SK"),
    "GSI1": ("GSI1PK", "GSI1SK"),
}


class BaseRepository(Generic[T]):
    """Typed reads and writes of one model class."""

    def __init__(
        self,
        model_class: type[T],
        table_name: str | None = None,
        region_name: str | None = None,
    ):
        """Initialize repository.

        Args:
            model_class: Model stored by this repository.
            table_name: DynamoDB table name. Defaults to TABLE_NAME env var.
            region_name: AWS region. Defaults to the boto3 session region.
        """
        self.model_class = model_class
        self.table_name = table_name or os.environ.get("TABLE_NAME", "contactflow-dev")
        self.region_name = region_name
        self._resource = None

    @property
    def dynamodb(self):
        """DynamoDB service resource, created on first use."""
        if self._resource is None:
            self._resource = boto3.resource("dynamodb", region_name=self.region_name)
        return self._resource

    @property
    def table(self):
        return self.dynamodb.Table(self.table_name)

    def table_status(self) -> str:
        """Return the table status, e.g. ACTIVE.

        Raises:
            ClientError: If the table cannot be described.
        """
        description = self.dynamodb.meta.client.describe_table(TableName=self.table_name)
        return description["Table"]["TableStatus"]

    def get(self, pk: str, sk: str) -> T | None:
        """Fetch one item by key, or None."""
        try:
            item = self.table.get_item(Key={"PK": pk, "SK": sk}).get("Item")
        except ClientError as e:
            logger.error("DynamoDB get_item failed", error=str(e), pk=pk, sk=sk)
            raise

        return self.model_class.from_dynamodb(item) if item else None

    def create(self, entity: T, gsi_keys: dict[str, str] | None = None) -> T:
        """Insert a new item.

        Raises:
            ConflictError: If an item with the same key already exists.
        """
        entity.update_timestamp()
        item = {**entity.to_dynamodb(), **entity.get_keys(), **(gsi_keys or {})}

        try:
            self.table.put_item(Item=item, ConditionExpression="attribute_not_exists(PK)")
        except ClientError as e:
            if e.response["Error"]["Code"] == "ConditionalCheckFailedException":
                raise ConflictError(f"{self.model_class.__name__} {entity.id} already exists") from e
            logger.error("DynamoDB put_item failed", error=str(e), pk=item["PK"])
            raise

        logger.debug("Item created", pk=item["PK"], sk=item["SK"], model=self.model_class.__name__)
        return entity

    def query(
        self,
        pk: str,
        sk_prefix: str | None = None,
        index_name: str | None = None,
        limit: int | None = None,
        newest_first: bool = False,
        start_key: dict | None = None,
    ) -> tuple[list[T], dict | None]:
        """Query one partition of the table or of an index.

        Returns:
            Tuple of (items, key to resume from or None).
        """
        pk_attr, sk_attr = INDEX_KEYS[index_name]
        condition = f"{pk_attr} = :pk"
        values: dict[str, Any] = {":pk": pk}
        if sk_prefix:
            condition += f" AND begins_with({sk_attr}, :prefix)"
            values[":prefix"] = sk_prefix

        params: dict[str, Any] = {
            "KeyConditionExpression": condition,
            "ExpressionAttributeValues": values,
            "ScanIndexForward": not newest_first,
        }
        if index_name:
            params["IndexName"] = index_name
        if limit:
            params["Limit"] = limit
        if start_key:
            params["ExclusiveStartKey"] = start_key

        try:
            response = self.table.query(**params)
        except ClientError as e:
            logger.error("DynamoDB query failed", error=str(e), pk=pk, index=index_name)
            raise

        items = [self.model_class.from_dynamodb(raw) for raw in response.get("Items", [])]
        return items, response.get("LastEvaluatedKey")
