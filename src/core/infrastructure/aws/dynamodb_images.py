"""DynamoDB-backed implementation of ImageMetadataRepository."""

from collections.abc import Iterator
from decimal import Decimal
from typing import Any

from aws_lambda_powertools import Logger
from boto3.dynamodb.conditions import Key
from botocore.exceptions import ClientError

from core.infrastructure.adapters.dynamodb_adapter import (
    DynamoDBAdapterProtocol,
    is_conditional_check_failure,
)
from core.models.errors import NotFoundError, PersistenceError
from core.models.image import ImageRecord
from core.repositories.image_repository import ImageMetadataRepository
from core.utils.constants import (
    ERROR_CODE_IMAGE_NOT_FOUND,
    ERROR_CODE_RECORD_CREATE_FAILED,
    ERROR_CODE_RECORD_DELETE_FAILED,
    ERROR_CODE_RECORD_FETCH_FAILED,
    ERROR_CODE_RECORD_INVALID_FORMAT,
    ERROR_CODE_RECORD_LIST_FAILED,
    ERROR_CODE_RECORD_UPDATE_FAILED,
    IMAGE_FOLDER_CREATED_INDEX,
    IMAGE_USER_CREATED_INDEX,
    ROOT_SENTINEL,
    SERVICE_NAME,
)

logger = Logger(service=SERVICE_NAME, UTC=True)


def folder_key(user_id: str, folder_id: str | None) -> str:
    """Partition value of the folder GSI: owner plus folder (or root)."""
    return f"{user_id}#{folder_id or ROOT_SENTINEL}"


class DynamoDBImages(ImageMetadataRepository):
    """DynamoDB-backed image metadata storage with error handling.

    All boto3 errors are caught and translated into
    domain-specific errors with stable semantics.
    """

    def __init__(self, adapter: DynamoDBAdapterProtocol) -> None:
        self._db = adapter

    def create_image(self, *, record: ImageRecord) -> None:
        """Create metadata for an image.

        Raises:
            PersistenceError: If creation fails
        """
        logger.debug(
            "Creating image metadata",
            extra={"image_id": record.image_id, "user_id": record.user_id},
        )

        try:
            self._db.put_item(
                item=self._to_item(record),
                condition_expression="attribute_not_exists(image_id)",
            )
        except ClientError as exc:
            logger.error(
                "DynamoDB put_item failed",
                extra={"image_id": record.image_id, "user_id": record.user_id},
            )
            raise PersistenceError(
                message="Unable to save image metadata at this time",
                error_code=ERROR_CODE_RECORD_CREATE_FAILED,
                details={"image_id": record.image_id},
            ) from exc

        logger.info(
            "Image metadata created",
            extra={"image_id": record.image_id, "user_id": record.user_id},
        )

    def fetch_image(self, *, image_id: str) -> ImageRecord | None:
        """Fetch metadata for a single image.

        Raises:
            PersistenceError: If fetch fails
        """
        logger.debug("Fetching image metadata", extra={"image_id": image_id})

        try:
            response = self._db.get_item(key={"image_id": image_id}, consistent_read=True)
        except ClientError as exc:
            logger.error("DynamoDB get_item failed", extra={"image_id": image_id})
            raise PersistenceError(
                message="Unable to retrieve image metadata",
                error_code=ERROR_CODE_RECORD_FETCH_FAILED,
                details={"image_id": image_id},
            ) from exc

        item = response.get("Item")
        if item is None:
            return None

        if not isinstance(item, dict):
            raise PersistenceError(
                message="Invalid image metadata format",
                error_code=ERROR_CODE_RECORD_INVALID_FORMAT,
                details={"image_id": image_id},
            )

        return self._to_record(item)

    def save_image(self, *, record: ImageRecord) -> None:
        """Overwrite an existing image record.

        Raises:
            NotFoundError: If the record was deleted meanwhile
            PersistenceError: If the write fails
        """
        logger.debug("Saving image metadata", extra={"image_id": record.image_id})

        try:
            self._db.put_item(
                item=self._to_item(record),
                condition_expression="attribute_exists(image_id)",
            )
        except ClientError as exc:
            if is_conditional_check_failure(exc):
                raise NotFoundError(
                    message="Image not found",
                    error_code=ERROR_CODE_IMAGE_NOT_FOUND,
                    details={"image_id": record.image_id},
                ) from exc

            logger.error("DynamoDB put_item failed", extra={"image_id": record.image_id})
            raise PersistenceError(
                message="Unable to update image metadata",
                error_code=ERROR_CODE_RECORD_UPDATE_FAILED,
                details={"image_id": record.image_id},
            ) from exc

        logger.info("Image metadata saved", extra={"image_id": record.image_id})

    def remove_image(self, *, image_id: str) -> None:
        """Remove metadata for an image.

        Raises:
            PersistenceError: If deletion fails
        """
        logger.debug("Removing image metadata", extra={"image_id": image_id})

        try:
            self._db.delete_item(key={"image_id": image_id})
        except ClientError as exc:
            logger.error("DynamoDB delete_item failed", extra={"image_id": image_id})
            raise PersistenceError(
                message="Unable to delete image metadata",
                error_code=ERROR_CODE_RECORD_DELETE_FAILED,
                details={"image_id": image_id},
            ) from exc

        logger.info("Image metadata removed", extra={"image_id": image_id})

    def list_user_images(
        self,
        *,
        user_id: str,
        folder_id: str | None = None,
        root_only: bool = False,
    ) -> list[ImageRecord]:
        """List images for a user, newest first.

        NOTE:
        - Folder scoping uses the folder GSI; otherwise the user GSI.
        - created_at must be stored in ISO-8601 UTC format.
        """
        logger.debug(
            "Listing user images",
            extra={"user_id": user_id, "folder_id": folder_id, "root_only": root_only},
        )

        records = [
            self._to_record(item)
            for response in self._query(user_id, folder_id=folder_id, root_only=root_only)
            for item in response.get("Items", [])
        ]

        logger.info("User images listed", extra={"user_id": user_id, "count": len(records)})
        return records

    def count_folder_images(self, *, user_id: str, folder_id: str) -> int:
        """Count images directly inside a folder.

        Raises:
            PersistenceError: If the query fails
        """
        return sum(
            int(response.get("Count", 0))
            for response in self._query(user_id, folder_id=folder_id, Select="COUNT")
        )

    def iter_storage_keys(self) -> Iterator[str]:
        """Yield the storage key of every image record.

        Raises:
            PersistenceError: If the scan fails
        """
        scan_kwargs: dict[str, Any] = {"ProjectionExpression": "storage_key"}
        last_evaluated_key: dict[str, Any] | None = None

        try:
            while True:
                if last_evaluated_key:
                    scan_kwargs["ExclusiveStartKey"] = last_evaluated_key

                response = self._db.scan(**scan_kwargs)

                for item in response.get("Items", []):
                    key = item.get("storage_key")
                    if isinstance(key, str):
                        yield key

                last_evaluated_key = response.get("LastEvaluatedKey")
                if not last_evaluated_key:
                    break

        except ClientError as exc:
            logger.error("DynamoDB scan failed")
            raise PersistenceError(
                message="Unable to scan image metadata",
                error_code=ERROR_CODE_RECORD_LIST_FAILED,
            ) from exc

    def _query(
        self,
        user_id: str,
        *,
        folder_id: str | None = None,
        root_only: bool = False,
        **extra: Any,
    ) -> Iterator[dict[str, Any]]:
        if folder_id or root_only:
            key_condition = Key("folder_key").eq(folder_key(user_id, folder_id))
            index_name = IMAGE_FOLDER_CREATED_INDEX
        else:
            key_condition = Key("user_id").eq(user_id)
            index_name = IMAGE_USER_CREATED_INDEX

        query_kwargs: dict[str, Any] = {
            "IndexName": index_name,
            "KeyConditionExpression": key_condition,
            "ScanIndexForward": False,
            **extra,
        }

        last_evaluated_key: dict[str, Any] | None = None

        try:
            while True:
                if last_evaluated_key:
                    query_kwargs["ExclusiveStartKey"] = last_evaluated_key

                response = self._db.query(**query_kwargs)
                yield response

                last_evaluated_key = response.get("LastEvaluatedKey")
                if not last_evaluated_key:
                    break

        except ClientError as exc:
            logger.error("DynamoDB query failed", extra={"user_id": user_id})
            raise PersistenceError(
                message="Unable to list images for this user",
                error_code=ERROR_CODE_RECORD_LIST_FAILED,
                details={"user_id": user_id},
            ) from exc

    @staticmethod
    def _to_item(record: ImageRecord) -> dict[str, Any]:
        return {**record.model_dump(), "folder_key": folder_key(record.user_id, record.folder_id)}

    @staticmethod
    def _to_record(item: dict[str, Any]) -> ImageRecord:
        # The boto3 resource layer returns every number as Decimal
        data = {
            name: int(value) if isinstance(value, Decimal) else value
            for name, value in item.items()
            if name in ImageRecord.model_fields
        }

        try:
            return ImageRecord.model_validate(data)
        except ValueError as exc:
            raise PersistenceError(
                message="Invalid image metadata format",
                error_code=ERROR_CODE_RECORD_INVALID_FORMAT,
                details={"image_id": item.get("image_id")},
            ) from exc
