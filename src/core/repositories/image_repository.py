"""Abstract contract for image metadata persistence."""

from abc import ABC, abstractmethod
from collections.abc import Iterator

from core.models.image import ImageRecord


class ImageMetadataRepository(ABC):
    """Contract for storing and retrieving image metadata.

    Implementations could be DynamoDB, PostgreSQL, MongoDB, etc.
    Services depend on this interface, not the implementation.
    """

    @abstractmethod
    def create_image(self, *, record: ImageRecord) -> None:
        """Persist a new image record.

        Raises:
            PersistenceError: If creation fails
        """

    @abstractmethod
    def fetch_image(self, *, image_id: str) -> ImageRecord | None:
        """Fetch a single image record, None if it does not exist.

        Raises:
            PersistenceError: If the fetch fails
        """

    @abstractmethod
    def save_image(self, *, record: ImageRecord) -> None:
        """Overwrite an existing image record.

        Raises:
            NotFoundError: If the record no longer exists
            PersistenceError: If the write fails
        """

    @abstractmethod
    def remove_image(self, *, image_id: str) -> None:
        """Remove an image record.

        Raises:
            PersistenceError: If deletion fails
        """

    @abstractmethod
    def list_user_images(
        self,
        *,
        user_id: str,
        folder_id: str | None = None,
        root_only: bool = False,
    ) -> list[ImageRecord]:
        """List an owner's images, newest first.

        Args:
            user_id: Image owner
            folder_id: Restrict to one folder
            root_only: Restrict to images outside any folder

        Raises:
            PersistenceError: If the query fails
        """

    @abstractmethod
    def count_folder_images(self, *, user_id: str, folder_id: str) -> int:
        """Count the owner's images directly inside a folder.

        Raises:
            PersistenceError: If the query fails
        """

    @abstractmethod
    def iter_storage_keys(self) -> Iterator[str]:
        """Yield the storage key of every image record.

        Raises:
            PersistenceError: If the scan fails
        """
