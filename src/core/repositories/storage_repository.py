"""Abstract contract for image blob storage."""

from abc import ABC, abstractmethod
from collections.abc import Iterator
from dataclasses import dataclass


@dataclass(frozen=True)
class StoredObject:
    """Result of a successful blob write."""

    url: str
    key: str
    size: int
    format: str


class ImageStorageRepository(ABC):
    """Contract for storing and removing image files.

    Implementations could be S3, GCS, local disk, etc.
    Services depend on this interface, not the implementation.
    """

    @abstractmethod
    def store_image(
        self,
        *,
        image_id: str,
        owner_id: str,
        folder_name: str | None,
        file_data: bytes,
        mime_type: str,
    ) -> StoredObject:
        """Write image bytes under the owner's namespace.

        Args:
            image_id: Unique image identifier, used as the object name
            owner_id: Owner of the image
            folder_name: Name of the containing folder, None for root
            file_data: Binary image content
            mime_type: MIME type (e.g., 'image/jpeg')

        Returns:
            The stored object's public URL, key, size and format

        Raises:
            UploadError: If the write fails
        """

    @abstractmethod
    def remove_image(self, *, key: str) -> None:
        """Delete an image object by key.

        Raises:
            StorageDeleteError: If deletion fails
        """

    @abstractmethod
    def iter_keys(self) -> Iterator[str]:
        """Yield every object key in the image namespace.

        Raises:
            StorageError: If listing fails
        """
