"""DynamoDB-backed implementation of FolderRepository.

Sibling-name uniqueness is guarded by a marker item
``SIBLING#<owner>#<parent-or-root>#<name>`` written conditionally into the
folders table. Markers carry no ``user_id``/``parent_key`` attributes, so
they never appear in the ``user-parent-index`` GSI.
"""

from collections.abc import Iterator
from typing import Any

from aws_lambda_powertools import Logger
from boto3.dynamodb.conditions import Key
from botocore.exceptions import ClientError

from core.infrastructure.adapters.dynamodb_adapter import (
    DynamoDBAdapterProtocol,
    is_conditional_check_failure,
)
from core.models.errors import ConflictError, NotFoundError, PersistenceError
from core.models.folder import Folder
from core.repositories.folder_repository import FolderRepository
from core.utils.constants import (
    ERROR_CODE_FOLDER_NAME_TAKEN,
    ERROR_CODE_FOLDER_NOT_FOUND,
    ERROR_CODE_RECORD_CREATE_FAILED,
    ERROR_CODE_RECORD_DELETE_FAILED,
    ERROR_CODE_RECORD_FETCH_FAILED,
    ERROR_CODE_RECORD_INVALID_FORMAT,
    ERROR_CODE_RECORD_LIST_FAILED,
    ERROR_CODE_RECORD_UPDATE_FAILED,
    FOLDER_PARENT_INDEX,
    ROOT_SENTINEL,
    SERVICE_NAME,
    SIBLING_MARKER_PREFIX,
)

logger = Logger(service=SERVICE_NAME, UTC=True)


def parent_key(parent_id: str | None) -> str:
    return parent_id or ROOT_SENTINEL


def sibling_marker_id(user_id: str, parent_id: str | None, name: str) -> str:
    return f"{SIBLING_MARKER_PREFIX}{user_id}#{parent_key(parent_id)}#{name}"


class DynamoDBFolders(FolderRepository):
    """DynamoDB-backed folder tree storage with error handling.

    All boto3 errors are caught and translated into
    domain-specific errors with stable semantics.
    """

    def __init__(self, adapter: DynamoDBAdapterProtocol) -> None:
        self._db = adapter

    def create_folder(self, *, folder: Folder) -> None:
        """Reserve the sibling name, then write the folder record.

        Raises:
            ConflictError: If a sibling with the same name exists
            PersistenceError: If creation fails
        """
        logger.debug(
            "Creating folder",
            extra={"folder_id": folder.folder_id, "user_id": folder.user_id},
        )

        self._reserve_name(folder.user_id, folder.parent_id, folder.name, folder.folder_id)

        try:
            self._db.put_item(
                item=self._to_item(folder),
                condition_expression="attribute_not_exists(folder_id)",
            )
        except ClientError as exc:
            logger.error("DynamoDB put_item failed", extra={"folder_id": folder.folder_id})
            self._release_name(folder.user_id, folder.parent_id, folder.name)
            raise PersistenceError(
                message="Unable to create folder at this time",
                error_code=ERROR_CODE_RECORD_CREATE_FAILED,
                details={"folder_id": folder.folder_id},
            ) from exc

        logger.info(
            "Folder created",
            extra={"folder_id": folder.folder_id, "user_id": folder.user_id},
        )

    def fetch_folder(self, *, folder_id: str) -> Folder | None:
        """Fetch a single folder.

        Raises:
            PersistenceError: If fetch fails
        """
        logger.debug("Fetching folder", extra={"folder_id": folder_id})

        item = self._get(folder_id)
        if item is None or "user_id" not in item:
            return None

        return self._to_folder(item)

    def find_sibling(self, *, user_id: str, parent_id: str | None, name: str) -> str | None:
        """Return the id of the folder holding the sibling name, if any."""
        marker = self._get(sibling_marker_id(user_id, parent_id, name))

        if marker is None:
            return None

        target_id = marker.get("target_id")
        return target_id if isinstance(target_id, str) else None

    def save_folder(self, *, folder: Folder, previous_name: str | None = None) -> None:
        """Overwrite a folder, moving its sibling-name reservation on rename.

        Raises:
            ConflictError: If the new name is taken by a sibling
            NotFoundError: If the folder no longer exists
            PersistenceError: If the write fails
        """
        renamed = previous_name is not None and previous_name != folder.name

        logger.debug(
            "Saving folder",
            extra={"folder_id": folder.folder_id, "renamed": renamed},
        )

        # Step 1: Reserve the new name before touching the record
        if renamed:
            self._reserve_name(folder.user_id, folder.parent_id, folder.name, folder.folder_id)

        # Step 2: Overwrite the record
        try:
            self._db.put_item(
                item=self._to_item(folder),
                condition_expression="attribute_exists(folder_id)",
            )
        except ClientError as exc:
            if renamed:
                self._release_name(folder.user_id, folder.parent_id, folder.name)

            if is_conditional_check_failure(exc):
                raise NotFoundError(
                    message="Folder not found",
                    error_code=ERROR_CODE_FOLDER_NOT_FOUND,
                    details={"folder_id": folder.folder_id},
                ) from exc

            logger.error("DynamoDB put_item failed", extra={"folder_id": folder.folder_id})
            raise PersistenceError(
                message="Unable to update folder at this time",
                error_code=ERROR_CODE_RECORD_UPDATE_FAILED,
                details={"folder_id": folder.folder_id},
            ) from exc

        # Step 3: Release the old name
        if renamed and previous_name is not None:
            self._release_name(folder.user_id, folder.parent_id, previous_name)

        logger.info("Folder saved", extra={"folder_id": folder.folder_id})

    def update_path(self, *, folder_id: str, path: str, updated_at: str) -> None:
        """Rewrite the materialized path of one folder.

        Raises:
            PersistenceError: If the write fails
        """
        try:
            self._db.update_item(
                key={"folder_id": folder_id},
                UpdateExpression="SET #path = :path, updated_at = :updated_at",
                ConditionExpression="attribute_exists(folder_id)",
                ExpressionAttributeNames={"#path": "path"},
                ExpressionAttributeValues={":path": path, ":updated_at": updated_at},
            )
        except ClientError as exc:
            if is_conditional_check_failure(exc):
                # Deleted concurrently; nothing left to rewrite
                logger.warning("Folder vanished during path update", extra={"folder_id": folder_id})
                return

            logger.error("DynamoDB update_item failed", extra={"folder_id": folder_id})
            raise PersistenceError(
                message="Unable to update folder path",
                error_code=ERROR_CODE_RECORD_UPDATE_FAILED,
                details={"folder_id": folder_id},
            ) from exc

    def remove_folder(self, *, folder: Folder) -> None:
        """Remove the folder record and its sibling-name reservation.

        Raises:
            PersistenceError: If deletion fails
        """
        logger.debug("Removing folder", extra={"folder_id": folder.folder_id})

        try:
            self._db.delete_item(key={"folder_id": folder.folder_id})
        except ClientError as exc:
            logger.error("DynamoDB delete_item failed", extra={"folder_id": folder.folder_id})
            raise PersistenceError(
                message="Unable to delete folder",
                error_code=ERROR_CODE_RECORD_DELETE_FAILED,
                details={"folder_id": folder.folder_id},
            ) from exc

        self._release_name(folder.user_id, folder.parent_id, folder.name)
        logger.info("Folder removed", extra={"folder_id": folder.folder_id})

    def list_children(self, *, user_id: str, parent_id: str | None) -> list[Folder]:
        """List direct children of a parent, newest first.

        Raises:
            PersistenceError: If the query fails
        """
        logger.debug(
            "Listing folders",
            extra={"user_id": user_id, "parent_id": parent_id},
        )

        folders = [
            self._to_folder(item)
            for response in self._query_children(user_id, parent_id)
            for item in response.get("Items", [])
        ]
        folders.sort(key=lambda folder: folder.created_at, reverse=True)

        logger.info("Folders listed", extra={"user_id": user_id, "count": len(folders)})
        return folders

    def count_children(self, *, user_id: str, parent_id: str) -> int:
        """Count direct children of a folder.

        Raises:
            PersistenceError: If the query fails
        """
        return sum(
            int(response.get("Count", 0))
            for response in self._query_children(user_id, parent_id, Select="COUNT")
        )

    def _query_children(
        self,
        user_id: str,
        parent_id: str | None,
        **extra: Any,
    ) -> Iterator[dict[str, Any]]:
        query_kwargs: dict[str, Any] = {
            "IndexName": FOLDER_PARENT_INDEX,
            "KeyConditionExpression": (
                Key("user_id").eq(user_id) & Key("parent_key").eq(parent_key(parent_id))
            ),
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
                message="Unable to list folders",
                error_code=ERROR_CODE_RECORD_LIST_FAILED,
                details={"user_id": user_id},
            ) from exc

    def _get(self, folder_id: str) -> dict[str, Any] | None:
        try:
            response = self._db.get_item(key={"folder_id": folder_id}, consistent_read=True)
        except ClientError as exc:
            logger.error("DynamoDB get_item failed", extra={"folder_id": folder_id})
            raise PersistenceError(
                message="Unable to retrieve folder",
                error_code=ERROR_CODE_RECORD_FETCH_FAILED,
                details={"folder_id": folder_id},
            ) from exc

        item = response.get("Item")
        if item is not None and not isinstance(item, dict):
            raise PersistenceError(
                message="Invalid folder record format",
                error_code=ERROR_CODE_RECORD_INVALID_FORMAT,
                details={"folder_id": folder_id},
            )

        return item

    def _reserve_name(self, user_id: str, parent_id: str | None, name: str, folder_id: str) -> None:
        try:
            self._db.put_item(
                item={
                    "folder_id": sibling_marker_id(user_id, parent_id, name),
                    "target_id": folder_id,
                },
                condition_expression="attribute_not_exists(folder_id)",
            )
        except ClientError as exc:
            if is_conditional_check_failure(exc):
                raise ConflictError(
                    message="A folder with this name already exists here",
                    error_code=ERROR_CODE_FOLDER_NAME_TAKEN,
                    details={"name": name, "parent_id": parent_id},
                ) from exc

            logger.error("DynamoDB name reservation failed", extra={"folder_id": folder_id})
            raise PersistenceError(
                message="Unable to save folder at this time",
                error_code=ERROR_CODE_RECORD_CREATE_FAILED,
                details={"folder_id": folder_id},
            ) from exc

    def _release_name(self, user_id: str, parent_id: str | None, name: str) -> None:
        try:
            self._db.delete_item(key={"folder_id": sibling_marker_id(user_id, parent_id, name)})
        except ClientError:
            logger.exception(
                "Failed to release folder name reservation",
                extra={"user_id": user_id, "name": name},
            )

    @staticmethod
    def _to_item(folder: Folder) -> dict[str, Any]:
        return {**folder.model_dump(), "parent_key": parent_key(folder.parent_id)}

    @staticmethod
    def _to_folder(item: dict[str, Any]) -> Folder:
        try:
            return Folder.model_validate({name: item[name] for name in Folder.model_fields if name in item})
        except ValueError as exc:
            raise PersistenceError(
                message="Invalid folder record format",
                error_code=ERROR_CODE_RECORD_INVALID_FORMAT,
                details={"folder_id": item.get("folder_id")},
            ) from exc
