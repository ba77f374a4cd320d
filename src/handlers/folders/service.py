"""Business logic for an owner's folder tree.

Paths are materialized at write time by walking the stored parent chain;
a rename rewrites the paths of every descendant.
"""

from collections import deque

from aws_lambda_powertools import Logger

from core.config import Settings
from core.infrastructure.adapters.dynamodb_adapter import DynamoDBAdapter
from core.infrastructure.aws.dynamodb_folders import DynamoDBFolders
from core.infrastructure.aws.dynamodb_images import DynamoDBImages
from core.models.errors import ConflictError, NotFoundError, PersistenceError
from core.models.folder import Folder, FolderView
from core.repositories.folder_repository import FolderRepository
from core.repositories.image_repository import ImageMetadataRepository
from core.utils.constants import (
    DEFAULT_FOLDER_COLOR,
    ERROR_CODE_FOLDER_NAME_TAKEN,
    ERROR_CODE_FOLDER_NOT_EMPTY,
    ERROR_CODE_FOLDER_NOT_FOUND,
    FOLDER_ID_PREFIX,
    FOLDER_PATH_SEPARATOR,
    MAX_FOLDER_DEPTH,
    SERVICE_NAME,
)
from core.utils.time import new_id, utc_now_iso

logger = Logger(service=SERVICE_NAME, UTC=True)


def join_path(*names: str) -> str:
    return FOLDER_PATH_SEPARATOR.join(names)


class FolderService:
    """Application service responsible for folders.

    This service orchestrates:
    - Ownership checks (foreign folders are reported as missing)
    - Sibling-name uniqueness
    - Path materialization and rename cascades
    - Image counts and the delete guard
    """

    def __init__(
        self,
        *,
        folders: FolderRepository,
        images: ImageMetadataRepository,
    ) -> None:
        self.folders = folders
        self.images = images

    @classmethod
    def from_settings(cls, settings: Settings) -> "FolderService":
        """Wire the service to the DynamoDB folders and images tables."""
        return cls(
            folders=DynamoDBFolders(DynamoDBAdapter(settings.folders_table_name, settings=settings)),
            images=DynamoDBImages(DynamoDBAdapter(settings.images_table_name, settings=settings)),
        )

    def owned_folder(self, *, owner_id: str, folder_id: str) -> Folder:
        """Fetch a folder the caller owns.

        Raises:
            NotFoundError: If the folder is missing or owned by someone else
        """
        folder = self.folders.fetch_folder(folder_id=folder_id)

        if folder is None or folder.user_id != owner_id:
            raise NotFoundError(
                message="Folder not found",
                error_code=ERROR_CODE_FOLDER_NOT_FOUND,
                details={"folder_id": folder_id},
            )

        return folder

    def compute_path(self, *, owner_id: str, parent_id: str | None, name: str) -> str:
        """Join ancestor names from the root down to ``name``.

        Raises:
            PersistenceError: If the stored parent chain is broken or cyclic
        """
        names = [name]
        seen: set[str] = set()
        current = parent_id

        while current is not None:
            if current in seen or len(seen) >= MAX_FOLDER_DEPTH:
                raise PersistenceError(
                    message="Folder hierarchy is inconsistent",
                    details={"folder_id": current},
                )
            seen.add(current)

            ancestor = self.folders.fetch_folder(folder_id=current)
            if ancestor is None or ancestor.user_id != owner_id:
                raise PersistenceError(
                    message="Folder hierarchy is inconsistent",
                    details={"folder_id": current},
                )

            names.append(ancestor.name)
            current = ancestor.parent_id

        return join_path(*reversed(names))

    def create(
        self,
        *,
        owner_id: str,
        name: str,
        color: str = DEFAULT_FOLDER_COLOR,
        parent_id: str | None = None,
    ) -> FolderView:
        """Create a folder under ``parent_id`` (root when None).

        Raises:
            NotFoundError: If the parent is missing or not owned
            ConflictError: If a sibling already uses the name
        """
        logger.debug("Creating folder", extra={"user_id": owner_id, "parent_id": parent_id})

        # Step 1: Resolve the parent
        if parent_id is not None:
            self.owned_folder(owner_id=owner_id, folder_id=parent_id)

        # Step 2: Fast path sibling check (the repository write is the real guard)
        self._ensure_name_free(owner_id=owner_id, parent_id=parent_id, name=name)

        # Step 3: Materialize the path and persist
        folder = Folder(
            folder_id=new_id(FOLDER_ID_PREFIX),
            user_id=owner_id,
            name=name,
            color=color,
            parent_id=parent_id,
            path=self.compute_path(owner_id=owner_id, parent_id=parent_id, name=name),
            created_at=utc_now_iso(),
        )
        self.folders.create_folder(folder=folder)

        logger.info("Folder created", extra={"folder_id": folder.folder_id, "user_id": owner_id})
        return folder.view(image_count=0)

    def list_folders(self, *, owner_id: str, parent_id: str | None = None) -> list[FolderView]:
        """List the caller's folders directly under ``parent_id``, newest first."""
        children = self.folders.list_children(user_id=owner_id, parent_id=parent_id)

        return [
            child.view(image_count=self._image_count(owner_id, child.folder_id))
            for child in children
        ]

    def get(self, *, owner_id: str, folder_id: str) -> FolderView:
        folder = self.owned_folder(owner_id=owner_id, folder_id=folder_id)
        return folder.view(image_count=self._image_count(owner_id, folder_id))

    def update(
        self,
        *,
        owner_id: str,
        folder_id: str,
        name: str | None = None,
        color: str | None = None,
    ) -> FolderView:
        """Rename and/or recolor a folder.

        Raises:
            NotFoundError: If the folder is missing or not owned
            ConflictError: If the new name is taken by a sibling
        """
        folder = self.owned_folder(owner_id=owner_id, folder_id=folder_id)
        renamed = name is not None and name != folder.name

        changes: dict[str, str] = {"updated_at": utc_now_iso()}
        if color is not None:
            changes["color"] = color

        if renamed and name is not None:
            self._ensure_name_free(
                owner_id=owner_id,
                parent_id=folder.parent_id,
                name=name,
                folder_id=folder_id,
            )
            changes["name"] = name
            changes["path"] = self.compute_path(
                owner_id=owner_id,
                parent_id=folder.parent_id,
                name=name,
            )

        updated = folder.model_copy(update=changes)
        self.folders.save_folder(folder=updated, previous_name=folder.name)

        if renamed:
            self._cascade_paths(updated)

        logger.info(
            "Folder updated",
            extra={"folder_id": folder_id, "user_id": owner_id, "renamed": renamed},
        )
        return updated.view(image_count=self._image_count(owner_id, folder_id))

    def delete(self, *, owner_id: str, folder_id: str) -> None:
        """Delete an empty folder. Deletion is never recursive.

        Raises:
            NotFoundError: If the folder is missing or not owned
            ConflictError: If it still holds subfolders or images
        """
        folder = self.owned_folder(owner_id=owner_id, folder_id=folder_id)

        child_count = self.folders.count_children(user_id=owner_id, parent_id=folder_id)
        image_count = self._image_count(owner_id, folder_id)

        if child_count or image_count:
            logger.info(
                "Refusing to delete non-empty folder",
                extra={"folder_id": folder_id, "children": child_count, "images": image_count},
            )
            raise ConflictError(
                message="Cannot delete folder: it contains subfolders or images",
                error_code=ERROR_CODE_FOLDER_NOT_EMPTY,
                details={"subfolders": child_count, "images": image_count},
            )

        self.folders.remove_folder(folder=folder)
        logger.info("Folder deleted", extra={"folder_id": folder_id, "user_id": owner_id})

    def _ensure_name_free(
        self,
        *,
        owner_id: str,
        parent_id: str | None,
        name: str,
        folder_id: str | None = None,
    ) -> None:
        holder = self.folders.find_sibling(user_id=owner_id, parent_id=parent_id, name=name)

        if holder is not None and holder != folder_id:
            raise ConflictError(
                message="A folder with this name already exists here",
                error_code=ERROR_CODE_FOLDER_NAME_TAKEN,
                details={"name": name, "parent_id": parent_id},
            )

    def _cascade_paths(self, root: Folder) -> None:
        """Rewrite descendant paths breadth-first below a renamed folder."""
        timestamp = utc_now_iso()
        queue: deque[tuple[str, str]] = deque([(root.folder_id, root.path)])
        rewritten = 0

        while queue:
            parent_id, parent_path = queue.popleft()

            for child in self.folders.list_children(user_id=root.user_id, parent_id=parent_id):
                child_path = join_path(parent_path, child.name)
                self.folders.update_path(folder_id=child.folder_id, path=child_path, updated_at=timestamp)
                queue.append((child.folder_id, child_path))
                rewritten += 1

        if rewritten:
            logger.info(
                "Descendant paths rewritten",
                extra={"folder_id": root.folder_id, "count": rewritten},
            )

    def _image_count(self, owner_id: str, folder_id: str) -> int:
        return self.images.count_folder_images(user_id=owner_id, folder_id=folder_id)
