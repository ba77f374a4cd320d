"""Folder record and API view."""

from pydantic import BaseModel, Field, StrictStr

from core.utils.constants import DEFAULT_FOLDER_COLOR


class Folder(BaseModel):
    """Folder record as persisted in the folders table.

    ``parent_id`` is ``None`` for folders at the root. ``path`` is the
    materialized ``/``-joined chain of names from the root ancestor down to
    this folder.
    """

    folder_id: StrictStr = Field(..., description="Unique folder identifier")
    user_id: StrictStr = Field(..., description="Owner user identifier")
    name: StrictStr = Field(..., description="Folder name, unique among siblings")
    color: StrictStr = Field(DEFAULT_FOLDER_COLOR, description="Hex display color")
    parent_id: StrictStr | None = Field(None, description="Parent folder, None for root")
    path: StrictStr = Field(..., description="Materialized ancestor path")

    created_at: StrictStr = Field(..., description="ISO-8601 creation timestamp (UTC)")
    updated_at: StrictStr | None = Field(None, description="ISO-8601 last update timestamp (UTC)")

    def view(self, *, image_count: int = 0) -> "FolderView":
        return FolderView(
            id=self.folder_id,
            name=self.name,
            color=self.color,
            parent_id=self.parent_id,
            path=self.path,
            image_count=image_count,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class FolderView(BaseModel):
    """Folder as returned by the API."""

    id: str
    name: str
    color: str
    parent_id: str | None
    path: str
    image_count: int = 0
    created_at: str
    updated_at: str | None = None
