"""Global constants used throughout the application.

This module centralizes all magic numbers, string literals, and configuration
values that are used across multiple modules. Using constants prevents hardcoding
values and makes it easy to change them globally.
"""

from typing import Final

# ============================================================================
# Error Codes
# ============================================================================


# Validation Errors
ERROR_CODE_VALIDATION_FAILED = "VALIDATION_FAILED"
ERROR_CODE_INVALID_FILTER = "INVALID_FILTER"
ERROR_CODE_UNSUPPORTED_MIME_TYPE = "UNSUPPORTED_MIME_TYPE"
ERROR_CODE_FILE_SIZE_EXCEEDED = "FILE_SIZE_EXCEEDED"
ERROR_CODE_FILE_MISSING = "FILE_MISSING"

# Conflict Errors
ERROR_CODE_CONFLICT = "CONFLICT"
ERROR_CODE_FOLDER_NAME_TAKEN = "FOLDER_NAME_TAKEN"
ERROR_CODE_FOLDER_NOT_EMPTY = "FOLDER_NOT_EMPTY"
ERROR_CODE_EMAIL_TAKEN = "EMAIL_TAKEN"

# Auth Errors
ERROR_CODE_UNAUTHORIZED = "UNAUTHORIZED"
ERROR_CODE_INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
ERROR_CODE_INVALID_TOKEN = "INVALID_TOKEN"

# Not Found Errors
ERROR_CODE_RESOURCE_NOT_FOUND = "NOT_FOUND"
ERROR_CODE_FOLDER_NOT_FOUND = "FOLDER_NOT_FOUND"
ERROR_CODE_IMAGE_NOT_FOUND = "IMAGE_NOT_FOUND"
ERROR_CODE_USER_NOT_FOUND = "USER_NOT_FOUND"

# Storage Errors
ERROR_CODE_STORAGE = "STORAGE_ERROR"
ERROR_CODE_IMAGE_UPLOAD_FAILED = "IMAGE_UPLOAD_FAILED"
ERROR_CODE_IMAGE_DELETE_FAILED = "IMAGE_DELETE_FAILED"

# Persistence / DynamoDB Errors
ERROR_CODE_PERSISTENCE = "PERSISTENCE_ERROR"
ERROR_CODE_RECORD_CREATE_FAILED = "RECORD_CREATE_FAILED"
ERROR_CODE_RECORD_FETCH_FAILED = "RECORD_FETCH_FAILED"
ERROR_CODE_RECORD_UPDATE_FAILED = "RECORD_UPDATE_FAILED"
ERROR_CODE_RECORD_DELETE_FAILED = "RECORD_DELETE_FAILED"
ERROR_CODE_RECORD_LIST_FAILED = "RECORD_LIST_FAILED"
ERROR_CODE_RECORD_INVALID_FORMAT = "RECORD_INVALID_FORMAT"

# Unexpected
ERROR_CODE_INTERNAL_ERROR = "INTERNAL_ERROR"


# ============================================================================
# File Upload Constraints
# ============================================================================

MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB in bytes


MIME_TYPE_EXTENSION_MAP: Final[dict[str, tuple[str, ...]]] = {
    "image/jpeg": ("jpg", "jpeg"),
    "image/png": ("png",),
    "image/gif": ("gif",),
    "image/webp": ("webp",),
}

ALLOWED_MIME_TYPES: Final[frozenset[str]] = frozenset(MIME_TYPE_EXTENSION_MAP.keys())

UPLOAD_FIELD_NAME = "image"

# ============================================================================
# Folder Constraints
# ============================================================================

ROOT_SENTINEL = "root"
FOLDER_NAME_MAX_LENGTH = 100
FOLDER_PATH_SEPARATOR = "/"
DEFAULT_FOLDER_COLOR = "#3B82F6"
HEX_COLOR_PATTERN = r"^#([A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})$"
MAX_FOLDER_DEPTH = 64

# ============================================================================
# Image Metadata Constraints
# ============================================================================

IMAGE_NAME_MAX_LENGTH = 200
MAX_TAGS = 20
TAG_MAX_LENGTH = 50
UNTITLED_IMAGE_NAME = "Untitled Image"

# ============================================================================
# User Constraints
# ============================================================================

USER_NAME_MAX_LENGTH = 100
PASSWORD_MIN_LENGTH = 6
DEFAULT_USER_ROLE = "user"
BCRYPT_ROUNDS = 12

# ============================================================================
# Key Prefixes
# ============================================================================

USER_ID_PREFIX = "usr_"
FOLDER_ID_PREFIX = "fld_"
IMAGE_ID_PREFIX = "img_"
EMAIL_MARKER_PREFIX = "EMAIL#"
SIBLING_MARKER_PREFIX = "SIBLING#"

# ============================================================================
# DynamoDB Indexes
# ============================================================================

FOLDER_PARENT_INDEX = "user-parent-index"
IMAGE_USER_CREATED_INDEX = "user-created-index"
IMAGE_FOLDER_CREATED_INDEX = "folder-created-index"

# ============================================================================
# Pagination Constraints
# ============================================================================

DEFAULT_LIMIT = 20
MIN_LIMIT = 1
MAX_LIMIT = 100
DEFAULT_PAGE = 1

# ============================================================================
# API Gateway Configuration
# ============================================================================

CORS_ORIGIN = "*"
CORS_METHODS = "GET,POST,PUT,DELETE,OPTIONS"
CORS_HEADERS = "Content-Type,Authorization"
EXPOSE_HEADERS = "Content-Type,Content-Length"
DEFAULT_CONTENT_TYPE = "application/json"
BEARER_SCHEME = "bearer"

# ============================================================================
# Observability
# ============================================================================

SERVICE_NAME = "image-organizer"
METRICS_NAMESPACE = "ImageOrganizer"

# ============================================================================
# Helper Functions
# ============================================================================


def get_max_file_size_mb(max_file_size: int = MAX_FILE_SIZE) -> int:
    """Get maximum file size in megabytes."""
    return max_file_size // (1024 * 1024)


def format_file_size(size_bytes: int) -> str:
    """Format file size in human-readable format.

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted file size string
    """
    size: float = float(size_bytes)

    for unit in ("B", "KB", "MB", "GB"):
        if size < 1024.0:
            return f"{size:.1f} {unit}"
        size /= 1024.0

    return f"{size:.1f} TB"
