"""Pydantic models for image upload, query and update requests/responses."""

import base64
import binascii
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from core.models.image import ImageView
from core.utils.constants import (
    DEFAULT_LIMIT,
    DEFAULT_PAGE,
    IMAGE_NAME_MAX_LENGTH,
    MAX_LIMIT,
    MIN_LIMIT,
)
from core.utils.tags import parse_tags

FOLDER_ID_ALIASES = AliasChoices("folderId", "folder_id")


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class UploadImageFields(BaseModel):
    """Optional metadata sent alongside the uploaded file."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str | None = Field(None, max_length=IMAGE_NAME_MAX_LENGTH, description="Display name")
    folder_id: str | None = Field(
        None,
        validation_alias=FOLDER_ID_ALIASES,
        description="Target folder id, absent or 'root' for the root",
    )
    tags: list[str] = Field(default_factory=list, description="Comma-separated or list of tags")

    @field_validator("name", "folder_id", mode="before")
    @classmethod
    def blank_is_absent(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @field_validator("tags", mode="before")
    @classmethod
    def validate_tags(cls, value: Any) -> list[str]:
        return parse_tags(value)


class UploadImageJson(UploadImageFields):
    """JSON upload for programmatic clients: base64 file plus metadata."""

    file: str | None = Field(None, description="Base64 encoded image file")
    file_name: str | None = Field(
        None,
        validation_alias=AliasChoices("file_name", "fileName", "filename"),
        description="Original file name, used as the default display name",
    )

    @field_validator("file")
    @classmethod
    def validate_file(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None

        try:
            base64.b64decode(value, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ValueError("Invalid base64 encoded file") from exc

        return value

    def file_bytes(self) -> bytes:
        if self.file is None:
            return b""
        return base64.b64decode(self.file, validate=True)


class ListImagesQuery(BaseModel):
    """Query parameters for listing images."""

    model_config = ConfigDict(str_strip_whitespace=True)

    folder_id: str | None = Field(
        None,
        validation_alias=FOLDER_ID_ALIASES,
        description="Folder id, 'root' for root-only, absent for all images",
    )
    search: str | None = Field(None, description="Substring match on name or tags")
    page: int = Field(DEFAULT_PAGE, ge=1, description="Page number (1-based)")
    limit: int = Field(DEFAULT_LIMIT, ge=MIN_LIMIT, le=MAX_LIMIT, description="Results per page")

    @field_validator("folder_id", "search", mode="before")
    @classmethod
    def blank_is_absent(cls, value: Any) -> Any:
        return _blank_to_none(value)


class SearchImagesQuery(BaseModel):
    """Query parameters for the dedicated search endpoint."""

    model_config = ConfigDict(str_strip_whitespace=True)

    q: str | None = Field(None, description="Search term, required")
    page: int = Field(DEFAULT_PAGE, ge=1)
    limit: int = Field(DEFAULT_LIMIT, ge=MIN_LIMIT, le=MAX_LIMIT)


class UpdateImageRequest(BaseModel):
    """Validation model for rename/retag; absent fields are left unchanged."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str | None = Field(None, min_length=1, max_length=IMAGE_NAME_MAX_LENGTH)
    tags: list[str] | None = Field(None, description="Replacement tags; an empty string clears them")

    @field_validator("tags", mode="before")
    @classmethod
    def validate_tags(cls, value: Any) -> list[str] | None:
        if value is None:
            return None
        return parse_tags(value)


class ImageResponse(BaseModel):
    """Response carrying a single image."""

    message: str = Field(..., description="Success message")
    data: ImageView = Field(..., description="The image")


class DeleteImageResponse(BaseModel):
    """Response for a successful delete."""

    message: str = Field(..., description="Success message")
    image_id: str = Field(..., description="Deleted image id")
