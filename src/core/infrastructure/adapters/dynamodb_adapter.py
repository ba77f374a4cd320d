"""One DynamoDB table behind a keyword-only, snake_case interface.

The adapter is purely mechanical: boto3 errors propagate untouched and the
repositories in ``core.infrastructure.aws`` translate them.
"""

from typing import Any, Protocol

import boto3
from botocore.exceptions import ClientError

from core.config import Settings
from core.infrastructure.adapters.session import connection_options

CONDITIONAL_CHECK_FAILED = "ConditionalCheckFailedException"


class DynamoDBAdapterProtocol(Protocol):
    """What repositories need from a table."""

    def put_item(
        self,
        *,
        item: dict[str, Any],
        condition_expression: str | None = None,
    ) -> dict[str, Any]: ...
    def get_item(self, *, key: dict[str, Any], consistent_read: bool = False) -> dict[str, Any]: ...
    def delete_item(self, *, key: dict[str, Any]) -> dict[str, Any]: ...
    def update_item(self, *, key: dict[str, Any], **kwargs: Any) -> dict[str, Any]: ...
    def query(self, **kwargs: Any) -> dict[str, Any]: ...
    def scan(self, **kwargs: Any) -> dict[str, Any]: ...


class DynamoDBAdapter:
    """boto3 ``Table`` wrapper for one of the organizer tables."""

    def __init__(self, table_name: str, *, settings: Settings) -> None:
        if not table_name:
            raise RuntimeError("DynamoDB table name is not configured")

        self.table_name = table_name
        self.table = boto3.resource("dynamodb", **connection_options(settings)).Table(table_name)

    def put_item(
        self,
        *,
        item: dict[str, Any],
        condition_expression: str | None = None,
    ) -> dict[str, Any]:
        """Write ``item``; with a condition the write is atomic check-and-set."""
        if condition_expression is None:
            return self.table.put_item(Item=item)
        return self.table.put_item(Item=item, ConditionExpression=condition_expression)

    def get_item(self, *, key: dict[str, Any], consistent_read: bool = False) -> dict[str, Any]:
        return self.table.get_item(Key=key, ConsistentRead=consistent_read)

    def delete_item(self, *, key: dict[str, Any]) -> dict[str, Any]:
        return self.table.delete_item(Key=key)

    def update_item(self, *, key: dict[str, Any], **kwargs: Any) -> dict[str, Any]:
        """Pass-through for ``UpdateExpression`` and friends."""
        return self.table.update_item(Key=key, **kwargs)

    def query(self, **kwargs: Any) -> dict[str, Any]:
        return self.table.query(**kwargs)

    def scan(self, **kwargs: Any) -> dict[str, Any]:
        return self.table.scan(**kwargs)


def is_conditional_check_failure(exc: ClientError) -> bool:
    """Whether a boto3 error is a failed ``ConditionExpression``."""
    return exc.response.get("Error", {}).get("Code") == CONDITIONAL_CHECK_FAILED
