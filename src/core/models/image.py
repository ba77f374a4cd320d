"""Shared image metadata model."""

from pydantic import BaseModel, Field, StrictInt, StrictStr

from core.models.pagination import PaginationInfo


class ImageRecord(BaseModel):
    """Image metadata as persisted in the images table."""

    image_id: StrictStr = Field(..., description="Unique image identifier")
    user_id: StrictStr = Field(..., description="Owner user identifier")
    name: StrictStr = Field(..., description="Display name, defaults to the file name")

    url: StrictStr = Field(..., description="Public HTTPS locator of the stored object")
    storage_key: StrictStr = Field(..., description="Object key used to delete the blob")
    folder_id: StrictStr | None = Field(None, description="Containing folder, None for root")

    size: StrictInt = Field(..., description="Image size in bytes")
    format: StrictStr = Field(..., description="Detected image format (jpg, png, ...)")
    tags: list[StrictStr] = Field(default_factory=list, description="Normalized tags")

    created_at: StrictStr = Field(..., description="ISO-8601 creation timestamp (UTC)")
    updated_at: StrictStr | None = Field(None, description="ISO-8601 last update timestamp (UTC)")

    def view(self) -> "ImageView":
        return ImageView(
            id=self.image_id,
            name=self.name,
            url=self.url,
            folder_id=self.folder_id,
            size=self.size,
            format=self.format,
            tags=list(self.tags),
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class ImageView(BaseModel):
    """Image as returned by the API. The storage key is never exposed."""

    id: str
    name: str
    url: str
    folder_id: str | None
    size: int
    format: str
    tags: list[str]
    created_at: str
    updated_at: str | None = None


class ImagePage(BaseModel):
    """One page of images plus pagination metadata."""

    images: list[ImageRecord] = Field(..., description="Images on this page")
    pagination: PaginationInfo = Field(..., description="Pagination metadata")


class ListImagesResponse(BaseModel):
    """Paginated response for listing and searching images."""

    message: str = Field(..., description="Human readable outcome")
    data: list[ImageView] = Field(..., description="Images on this page")
    pagination: PaginationInfo = Field(..., description="Pagination metadata")
    query: str | None = Field(None, description="Search term, for search responses")
