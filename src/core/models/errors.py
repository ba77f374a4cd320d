"""Domain errors of the image organizer.

Every error raised on purpose by a service or repository is an
``OrganizerError``. Subclasses only declare the HTTP status they are reported
with and their default error code; the API boundary turns them into the
standard error envelope without knowing about individual classes.
"""

from http import HTTPStatus
from typing import Any, ClassVar

from core.utils.constants import (
    ERROR_CODE_CONFLICT,
    ERROR_CODE_IMAGE_DELETE_FAILED,
    ERROR_CODE_IMAGE_UPLOAD_FAILED,
    ERROR_CODE_INTERNAL_ERROR,
    ERROR_CODE_INVALID_FILTER,
    ERROR_CODE_PERSISTENCE,
    ERROR_CODE_RESOURCE_NOT_FOUND,
    ERROR_CODE_STORAGE,
    ERROR_CODE_UNAUTHORIZED,
    ERROR_CODE_VALIDATION_FAILED,
)


class OrganizerError(Exception):
    """Base class for all organizer errors.

    Args:
        message: Client-facing description of the failure
        error_code: Stable machine-readable code, defaults to the class code
        details: Optional structured context (ids, field errors, ...)
    """

    status: ClassVar[HTTPStatus] = HTTPStatus.INTERNAL_SERVER_ERROR
    default_code: ClassVar[str] = ERROR_CODE_INTERNAL_ERROR
    default_message: ClassVar[str] = "Internal server error"

    message: str
    error_code: str
    details: dict[str, Any]

    def __init__(
        self,
        *,
        message: str | None = None,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message or self.default_message
        self.error_code = error_code or self.default_code
        self.details = details or {}

        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(error_code={self.error_code!r}, message={self.message!r})"


# 4xx: caller mistakes


class ValidationError(OrganizerError):
    """Malformed or out-of-range input."""

    status = HTTPStatus.BAD_REQUEST
    default_code = ERROR_CODE_VALIDATION_FAILED
    default_message = "Validation failed"


class FilterError(ValidationError):
    """Invalid listing, search or pagination parameters."""

    default_code = ERROR_CODE_INVALID_FILTER
    default_message = "Invalid filter parameters"


class ConflictError(OrganizerError):
    """A uniqueness or state rule would be violated (duplicate name, non-empty folder)."""

    status = HTTPStatus.BAD_REQUEST
    default_code = ERROR_CODE_CONFLICT
    default_message = "Request conflicts with existing data"


class UnauthorizedError(OrganizerError):
    """Missing, malformed, expired or wrong credential."""

    status = HTTPStatus.UNAUTHORIZED
    default_code = ERROR_CODE_UNAUTHORIZED
    default_message = "Not authorized"


class NotFoundError(OrganizerError):
    """Missing resource, or one owned by somebody else."""

    status = HTTPStatus.NOT_FOUND
    default_code = ERROR_CODE_RESOURCE_NOT_FOUND
    default_message = "Resource not found"


# 5xx: infrastructure failures


class StorageError(OrganizerError):
    default_code = ERROR_CODE_STORAGE
    default_message = "Image storage is unavailable"


class UploadError(StorageError):
    default_code = ERROR_CODE_IMAGE_UPLOAD_FAILED
    default_message = "Failed to upload image"


class StorageDeleteError(StorageError):
    default_code = ERROR_CODE_IMAGE_DELETE_FAILED
    default_message = "Failed to delete image"


class PersistenceError(OrganizerError):
    """A DynamoDB read or write failed."""

    default_code = ERROR_CODE_PERSISTENCE
    default_message = "Unable to reach the database"
