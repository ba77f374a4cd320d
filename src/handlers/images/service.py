"""Business logic for the image registry.

This module coordinates validation, blob storage and metadata persistence
for an owner's images while translating failures into domain-specific
errors.
"""

from aws_lambda_powertools import Logger

from core.config import Settings
from core.filters.image_query_filter import ImageQueryFilter
from core.filters.text_match_filter import TextMatchFilter
from core.infrastructure.adapters.dynamodb_adapter import DynamoDBAdapter
from core.infrastructure.adapters.s3_adapter import S3Adapter
from core.infrastructure.aws.dynamodb_folders import DynamoDBFolders
from core.infrastructure.aws.dynamodb_images import DynamoDBImages
from core.infrastructure.aws.s3_image_storage import S3ImageStorage
from core.models.errors import NotFoundError, ValidationError
from core.models.folder import Folder
from core.models.image import ImagePage, ImageRecord
from core.repositories.folder_repository import FolderRepository
from core.repositories.image_repository import ImageMetadataRepository
from core.repositories.storage_repository import ImageStorageRepository
from core.utils.constants import (
    ALLOWED_MIME_TYPES,
    DEFAULT_LIMIT,
    DEFAULT_PAGE,
    ERROR_CODE_FILE_MISSING,
    ERROR_CODE_FILE_SIZE_EXCEEDED,
    ERROR_CODE_FOLDER_NOT_FOUND,
    ERROR_CODE_IMAGE_NOT_FOUND,
    ERROR_CODE_UNSUPPORTED_MIME_TYPE,
    IMAGE_ID_PREFIX,
    IMAGE_NAME_MAX_LENGTH,
    ROOT_SENTINEL,
    SERVICE_NAME,
    UNTITLED_IMAGE_NAME,
    format_file_size,
    get_max_file_size_mb,
)
from core.utils.mime import detect_mime_type
from core.utils.time import new_id, utc_now_iso

logger = Logger(service=SERVICE_NAME, UTC=True)


class ImageService:
    """Application service responsible for an owner's images.

    This service orchestrates:
    - File validation (presence, size, image type)
    - Folder ownership checks (foreign folders are reported as missing)
    - Uploading image content to storage, then persisting metadata
    - Listing, searching and paginating
    - Deleting the blob before the metadata
    """

    def __init__(
        self,
        *,
        images: ImageMetadataRepository,
        folders: FolderRepository,
        storage: ImageStorageRepository,
        max_file_size: int,
    ) -> None:
        self.images = images
        self.folders = folders
        self.storage = storage
        self.max_file_size = max_file_size
        self.filters = ImageQueryFilter()

    @classmethod
    def from_settings(cls, settings: Settings) -> "ImageService":
        """Wire the service to DynamoDB and the S3 image bucket."""
        return cls(
            images=DynamoDBImages(DynamoDBAdapter(settings.images_table_name, settings=settings)),
            folders=DynamoDBFolders(DynamoDBAdapter(settings.folders_table_name, settings=settings)),
            storage=S3ImageStorage(
                S3Adapter(settings=settings),
                key_prefix=settings.image_key_prefix,
                public_base_url=settings.image_public_base_url,
            ),
            max_file_size=settings.max_file_size,
        )

    def validate_file(self, file_data: bytes) -> str:
        """Check presence, size and type of the uploaded bytes.

        Returns:
            The detected MIME type

        Raises:
            ValidationError: If the file is missing, too large or not an image
        """
        if not file_data:
            raise ValidationError(
                message="No image file provided",
                error_code=ERROR_CODE_FILE_MISSING,
            )

        if len(file_data) > self.max_file_size:
            raise ValidationError(
                message=f"File size exceeds {get_max_file_size_mb(self.max_file_size)}MB limit",
                error_code=ERROR_CODE_FILE_SIZE_EXCEEDED,
                details={"size": format_file_size(len(file_data))},
            )

        try:
            mime_type = detect_mime_type(file_data)
        except ValueError as exc:
            raise ValidationError(
                message="Only image files are allowed",
                error_code=ERROR_CODE_UNSUPPORTED_MIME_TYPE,
            ) from exc

        if mime_type not in ALLOWED_MIME_TYPES:
            logger.warning("Unsupported MIME type", extra={"mime_type": mime_type})
            raise ValidationError(
                message="Only image files are allowed",
                error_code=ERROR_CODE_UNSUPPORTED_MIME_TYPE,
                details={"mime_type": mime_type},
            )

        return mime_type

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

    def owned_image(self, *, owner_id: str, image_id: str) -> ImageRecord:
        """Fetch an image the caller owns.

        Raises:
            NotFoundError: If the image is missing or owned by someone else
        """
        record = self.images.fetch_image(image_id=image_id)

        if record is None or record.user_id != owner_id:
            raise NotFoundError(
                message="Image not found",
                error_code=ERROR_CODE_IMAGE_NOT_FOUND,
                details={"image_id": image_id},
            )

        return record

    def upload(
        self,
        *,
        owner_id: str,
        file_data: bytes,
        file_name: str | None = None,
        name: str | None = None,
        folder_id: str | None = None,
        tags: list[str] | None = None,
    ) -> ImageRecord:
        """Store an image and record its metadata.

        The upload flow is:
        1. Validate the file
        2. Resolve the target folder
        3. Upload image to object storage
        4. Persist image metadata (a stored blob is not rolled back)

        Raises:
            ValidationError: If the file is missing, too large or not an image
            NotFoundError: If the folder is missing or not owned
            UploadError: If storage upload fails
            PersistenceError: If metadata persistence fails
        """
        logger.debug("Starting image upload", extra={"user_id": owner_id, "folder_id": folder_id})

        # Step 1: Validate the file
        mime_type = self.validate_file(file_data)

        # Step 2: Resolve the target folder
        folder: Folder | None = None
        if folder_id and folder_id != ROOT_SENTINEL:
            folder = self.owned_folder(owner_id=owner_id, folder_id=folder_id)

        # Step 3: Upload image to storage
        image_id = new_id(IMAGE_ID_PREFIX)
        stored = self.storage.store_image(
            image_id=image_id,
            owner_id=owner_id,
            folder_name=folder.name if folder else None,
            file_data=file_data,
            mime_type=mime_type,
        )

        # Step 4: Persist metadata
        record = ImageRecord(
            image_id=image_id,
            user_id=owner_id,
            name=self.display_name(name, file_name),
            url=stored.url,
            storage_key=stored.key,
            folder_id=folder.folder_id if folder else None,
            size=stored.size,
            format=stored.format,
            tags=list(tags or []),
            created_at=utc_now_iso(),
        )

        try:
            self.images.create_image(record=record)
        except Exception:
            logger.warning(
                "Image metadata not saved, stored object is orphaned",
                extra={"image_id": image_id, "storage_key": stored.key},
            )
            raise

        logger.info(
            "Image uploaded successfully",
            extra={"image_id": image_id, "user_id": owner_id, "size": stored.size},
        )
        return record

    def list_images(
        self,
        *,
        owner_id: str,
        folder_id: str | None = None,
        search: str | None = None,
        page: int = DEFAULT_PAGE,
        limit: int = DEFAULT_LIMIT,
    ) -> ImagePage:
        """List the caller's images, newest first.

        ``folder_id`` absent lists every image, the root sentinel lists only
        images outside any folder, and a folder id lists that folder.

        Raises:
            NotFoundError: If the folder is missing or not owned
            FilterError: If pagination parameters are invalid
        """
        if folder_id == ROOT_SENTINEL:
            items = self.images.list_user_images(user_id=owner_id, root_only=True)
        elif folder_id:
            self.owned_folder(owner_id=owner_id, folder_id=folder_id)
            items = self.images.list_user_images(user_id=owner_id, folder_id=folder_id)
        else:
            items = self.images.list_user_images(user_id=owner_id)

        matched = self.filters.search(items, search=search)
        result = self.filters.paginate(matched, page=page, limit=limit)

        logger.info(
            "Images listed successfully",
            extra={"user_id": owner_id, "count": len(result.images), "total": result.pagination.total},
        )
        return result

    def search(
        self,
        *,
        owner_id: str,
        query: str | None,
        page: int = DEFAULT_PAGE,
        limit: int = DEFAULT_LIMIT,
    ) -> ImagePage:
        """Search all of the caller's images by name or tag.

        Raises:
            ValidationError: If the query is empty
        """
        if not TextMatchFilter.validate(query):
            raise ValidationError(message="Search query is required")

        return self.list_images(owner_id=owner_id, search=query, page=page, limit=limit)

    def empty_page(self, *, page: int = DEFAULT_PAGE, limit: int = DEFAULT_LIMIT) -> ImagePage:
        return self.filters.empty_page(page=page, limit=limit)

    def get(self, *, owner_id: str, image_id: str) -> ImageRecord:
        return self.owned_image(owner_id=owner_id, image_id=image_id)

    def update(
        self,
        *,
        owner_id: str,
        image_id: str,
        name: str | None = None,
        tags: list[str] | None = None,
    ) -> ImageRecord:
        """Replace the name and/or tags of an image.

        Raises:
            NotFoundError: If the image is missing or not owned
        """
        record = self.owned_image(owner_id=owner_id, image_id=image_id)

        if name is None and tags is None:
            return record

        changes: dict[str, object] = {"updated_at": utc_now_iso()}
        if name is not None:
            changes["name"] = name
        if tags is not None:
            changes["tags"] = list(tags)

        updated = record.model_copy(update=changes)
        self.images.save_image(record=updated)

        logger.info("Image updated", extra={"image_id": image_id, "user_id": owner_id})
        return updated

    def delete(self, *, owner_id: str, image_id: str) -> ImageRecord:
        """Delete the stored object, then the metadata.

        Metadata is kept when the object cannot be deleted.

        Raises:
            NotFoundError: If the image is missing or not owned
            StorageDeleteError: If the stored object cannot be deleted
        """
        record = self.owned_image(owner_id=owner_id, image_id=image_id)

        # Step 1: Delete the stored object
        self.storage.remove_image(key=record.storage_key)

        # Step 2: Delete the metadata
        self.images.remove_image(image_id=image_id)

        logger.info("Image deleted", extra={"image_id": image_id, "user_id": owner_id})
        return record

    @staticmethod
    def display_name(name: str | None, file_name: str | None) -> str:
        """Explicit name, else the original file name, else a placeholder."""
        for candidate in (name, file_name):
            if candidate and candidate.strip():
                return candidate.strip()[:IMAGE_NAME_MAX_LENGTH]
        return UNTITLED_IMAGE_NAME
