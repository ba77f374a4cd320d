"""Pydantic models for folder requests/responses."""

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from core.models.folder import FolderView
from core.utils.constants import (
    DEFAULT_FOLDER_COLOR,
    FOLDER_NAME_MAX_LENGTH,
    HEX_COLOR_PATTERN,
    ROOT_SENTINEL,
)


def normalize_parent(value: Any) -> str | None:
    """``None``, ``""`` and the root sentinel all mean the root."""
    if value is None:
        return None

    if not isinstance(value, str):
        raise ValueError("parent must be a folder id")

    value = value.strip()
    if not value or value == ROOT_SENTINEL:
        return None

    return value


class CreateFolderRequest(BaseModel):
    """Validation model for folder creation."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=FOLDER_NAME_MAX_LENGTH, description="Folder name")
    color: str = Field(DEFAULT_FOLDER_COLOR, pattern=HEX_COLOR_PATTERN, description="Hex color")
    parent: str | None = Field(
        None,
        validation_alias=AliasChoices("parent", "parentId", "parent_id"),
        description="Parent folder id, absent for the root",
    )

    @field_validator("color", mode="before")
    @classmethod
    def default_blank_color(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return DEFAULT_FOLDER_COLOR
        return value

    @field_validator("parent", mode="before")
    @classmethod
    def validate_parent(cls, value: Any) -> str | None:
        return normalize_parent(value)


class UpdateFolderRequest(BaseModel):
    """Validation model for rename/recolor. At least one field is required."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str | None = Field(None, min_length=1, max_length=FOLDER_NAME_MAX_LENGTH)
    color: str | None = Field(None, pattern=HEX_COLOR_PATTERN)

    @model_validator(mode="after")
    def require_change(self) -> "UpdateFolderRequest":
        if self.name is None and self.color is None:
            raise ValueError("Provide a name or a color to update")
        return self


class ListFoldersQuery(BaseModel):
    """Query parameters for listing folders."""

    parent: str | None = Field(
        None,
        validation_alias=AliasChoices("parent", "parentId", "parent_id"),
    )

    @field_validator("parent", mode="before")
    @classmethod
    def validate_parent(cls, value: Any) -> str | None:
        return normalize_parent(value)


class FolderResponse(BaseModel):
    """Response carrying a single folder."""

    message: str = Field(..., description="Success message")
    data: FolderView = Field(..., description="The folder")


class FolderListResponse(BaseModel):
    """Response carrying the folders under one parent."""

    message: str = Field(..., description="Success message")
    count: int = Field(..., description="Number of folders returned")
    data: list[FolderView] = Field(..., description="Folders, newest first")


class DeleteFolderResponse(BaseModel):
    """Response for a successful delete."""

    message: str = Field(..., description="Success message")
    folder_id: str = Field(..., description="Deleted folder id")
