"""DynamoDB-backed implementation of UserRepository.

Email uniqueness is guarded by a marker item ``EMAIL#<email>`` written
conditionally into the users table before the user record itself.
"""

from typing import Any

from aws_lambda_powertools import Logger
from botocore.exceptions import ClientError

from core.infrastructure.adapters.dynamodb_adapter import (
    DynamoDBAdapterProtocol,
    is_conditional_check_failure,
)
from core.models.errors import ConflictError, NotFoundError, PersistenceError
from core.models.user import User
from core.repositories.user_repository import UserRepository
from core.utils.constants import (
    EMAIL_MARKER_PREFIX,
    ERROR_CODE_EMAIL_TAKEN,
    ERROR_CODE_RECORD_CREATE_FAILED,
    ERROR_CODE_RECORD_FETCH_FAILED,
    ERROR_CODE_RECORD_INVALID_FORMAT,
    ERROR_CODE_RECORD_UPDATE_FAILED,
    ERROR_CODE_USER_NOT_FOUND,
    SERVICE_NAME,
)

logger = Logger(service=SERVICE_NAME, UTC=True)


def _email_marker_key(email: str) -> dict[str, str]:
    return {"user_id": f"{EMAIL_MARKER_PREFIX}{email}"}


class DynamoDBUsers(UserRepository):
    """DynamoDB-backed identity store with error handling."""

    def __init__(self, adapter: DynamoDBAdapterProtocol) -> None:
        self._db = adapter

    def create_user(self, *, user: User) -> None:
        """Reserve the email, then write the user record.

        Raises:
            ConflictError: If the email is already registered
            PersistenceError: If creation fails
        """
        logger.debug("Creating user", extra={"user_id": user.user_id})

        # Step 1: Reserve the email
        try:
            self._db.put_item(
                item={**_email_marker_key(user.email), "owner_id": user.user_id},
                condition_expression="attribute_not_exists(user_id)",
            )
        except ClientError as exc:
            if is_conditional_check_failure(exc):
                raise ConflictError(
                    message="User already exists",
                    error_code=ERROR_CODE_EMAIL_TAKEN,
                ) from exc

            logger.error("DynamoDB email reservation failed", extra={"user_id": user.user_id})
            raise PersistenceError(
                message="Unable to create user at this time",
                error_code=ERROR_CODE_RECORD_CREATE_FAILED,
            ) from exc

        # Step 2: Write the user record, releasing the email on failure
        try:
            self._db.put_item(
                item=user.model_dump(),
                condition_expression="attribute_not_exists(user_id)",
            )
        except ClientError as exc:
            logger.error("DynamoDB put_item failed", extra={"user_id": user.user_id})
            self._release_email(user.email)
            raise PersistenceError(
                message="Unable to create user at this time",
                error_code=ERROR_CODE_RECORD_CREATE_FAILED,
                details={"user_id": user.user_id},
            ) from exc

        logger.info("User created", extra={"user_id": user.user_id})

    def fetch_user(self, *, user_id: str) -> User | None:
        """Fetch a user by id.

        Raises:
            PersistenceError: If fetch fails
        """
        item = self._get(key={"user_id": user_id})

        if item is None or "email" not in item:
            return None

        return self._to_user(item)

    def find_by_email(self, *, email: str) -> User | None:
        """Resolve the email marker, then the user it points at.

        Raises:
            PersistenceError: If the lookup fails
        """
        marker = self._get(key=_email_marker_key(email))

        if marker is None:
            return None

        owner_id = marker.get("owner_id")
        if not isinstance(owner_id, str):
            return None

        return self.fetch_user(user_id=owner_id)

    def update_password(self, *, user_id: str, password_hash: str, updated_at: str) -> None:
        """Replace the stored password hash.

        Raises:
            NotFoundError: If the user does not exist
            PersistenceError: If the write fails
        """
        logger.debug("Updating password", extra={"user_id": user_id})

        try:
            self._db.update_item(
                key={"user_id": user_id},
                UpdateExpression="SET password_hash = :hash, updated_at = :updated_at",
                ConditionExpression="attribute_exists(email)",
                ExpressionAttributeValues={":hash": password_hash, ":updated_at": updated_at},
            )
        except ClientError as exc:
            if is_conditional_check_failure(exc):
                raise NotFoundError(
                    message="User not found",
                    error_code=ERROR_CODE_USER_NOT_FOUND,
                    details={"user_id": user_id},
                ) from exc

            logger.error("DynamoDB update_item failed", extra={"user_id": user_id})
            raise PersistenceError(
                message="Unable to update user at this time",
                error_code=ERROR_CODE_RECORD_UPDATE_FAILED,
                details={"user_id": user_id},
            ) from exc

        logger.info("Password updated", extra={"user_id": user_id})

    def _get(self, *, key: dict[str, str]) -> dict[str, Any] | None:
        try:
            response = self._db.get_item(key=key, consistent_read=True)
        except ClientError as exc:
            logger.error("DynamoDB get_item failed", extra={"key": key})
            raise PersistenceError(
                message="Unable to retrieve user",
                error_code=ERROR_CODE_RECORD_FETCH_FAILED,
            ) from exc

        item = response.get("Item")
        if item is not None and not isinstance(item, dict):
            raise PersistenceError(
                message="Invalid user record format",
                error_code=ERROR_CODE_RECORD_INVALID_FORMAT,
            )

        return item

    def _release_email(self, email: str) -> None:
        try:
            self._db.delete_item(key=_email_marker_key(email))
        except ClientError:
            logger.exception("Failed to release email reservation")

    @staticmethod
    def _to_user(item: dict[str, Any]) -> User:
        try:
            return User.model_validate({name: item.get(name) for name in User.model_fields if name in item})
        except ValueError as exc:
            raise PersistenceError(
                message="Invalid user record format",
                error_code=ERROR_CODE_RECORD_INVALID_FORMAT,
                details={"user_id": item.get("user_id")},
            ) from exc
