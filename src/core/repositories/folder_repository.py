"""Abstract contract for folder persistence."""

from abc import ABC, abstractmethod

from core.models.folder import Folder


class FolderRepository(ABC):
    """Contract for storing and retrieving an owner's folder tree.

    Implementations must enforce sibling-name uniqueness themselves;
    an application-level pre-check is not sufficient under concurrency.
    """

    @abstractmethod
    def create_folder(self, *, folder: Folder) -> None:
        """Persist a new folder.

        Raises:
            ConflictError: If a sibling with the same name exists
            PersistenceError: If creation fails
        """

    @abstractmethod
    def fetch_folder(self, *, folder_id: str) -> Folder | None:
        """Fetch a single folder, None if it does not exist.

        Raises:
            PersistenceError: If the fetch fails
        """

    @abstractmethod
    def find_sibling(self, *, user_id: str, parent_id: str | None, name: str) -> str | None:
        """Return the id of the sibling folder holding ``name``, if any.

        Raises:
            PersistenceError: If the lookup fails
        """

    @abstractmethod
    def save_folder(self, *, folder: Folder, previous_name: str | None = None) -> None:
        """Overwrite an existing folder.

        When ``previous_name`` differs from ``folder.name`` the sibling-name
        reservation is moved to the new name.

        Raises:
            ConflictError: If the new name is taken by a sibling
            PersistenceError: If the write fails
        """

    @abstractmethod
    def update_path(self, *, folder_id: str, path: str, updated_at: str) -> None:
        """Rewrite only the materialized path of a folder.

        Raises:
            PersistenceError: If the write fails
        """

    @abstractmethod
    def remove_folder(self, *, folder: Folder) -> None:
        """Remove a folder and release its sibling-name reservation.

        Raises:
            PersistenceError: If deletion fails
        """

    @abstractmethod
    def list_children(self, *, user_id: str, parent_id: str | None) -> list[Folder]:
        """List the owner's folders directly under a parent, newest first.

        Raises:
            PersistenceError: If the query fails
        """

    @abstractmethod
    def count_children(self, *, user_id: str, parent_id: str) -> int:
        """Count the owner's folders directly under a parent.

        Raises:
            PersistenceError: If the query fails
        """
