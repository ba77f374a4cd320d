"""S3-backed implementation of ImageStorageRepository."""

from collections.abc import Iterator
from urllib.parse import quote

from aws_lambda_powertools import Logger
from botocore.exceptions import BotoCoreError, ClientError

from core.infrastructure.adapters.s3_adapter import S3AdapterProtocol
from core.models.errors import StorageDeleteError, StorageError, UploadError
from core.repositories.storage_repository import ImageStorageRepository, StoredObject
from core.utils.constants import ROOT_SENTINEL, SERVICE_NAME
from core.utils.mime import extension_for

logger = Logger(service=SERVICE_NAME, UTC=True)


class S3ImageStorage(ImageStorageRepository):
    """Image storage implementation backed by Amazon S3.

    Objects live under ``<prefix>/<owner>/<folder name | root>/<image_id>.<ext>``.
    """

    def __init__(
        self,
        adapter: S3AdapterProtocol,
        *,
        key_prefix: str,
        public_base_url: str | None = None,
    ) -> None:
        self._s3 = adapter
        self._prefix = key_prefix.strip("/")
        self._public_base_url = public_base_url.rstrip("/") if public_base_url else None

    def build_key(self, *, image_id: str, owner_id: str, folder_name: str | None, mime_type: str) -> str:
        folder_segment = folder_name or ROOT_SENTINEL
        return f"{self._prefix}/{owner_id}/{folder_segment}/{image_id}.{extension_for(mime_type)}"

    def public_url(self, key: str) -> str:
        quoted = quote(key, safe="/")
        if self._public_base_url:
            return f"{self._public_base_url}/{quoted}"
        return f"https://{self._s3.bucket}.s3.{self._s3.region}.amazonaws.com/{quoted}"

    def store_image(
        self,
        *,
        image_id: str,
        owner_id: str,
        folder_name: str | None,
        file_data: bytes,
        mime_type: str,
    ) -> StoredObject:
        """Upload image bytes to S3 and describe the stored object."""
        key = self.build_key(
            image_id=image_id,
            owner_id=owner_id,
            folder_name=folder_name,
            mime_type=mime_type,
        )

        logger.debug(
            "Uploading image",
            extra={
                "image_id": image_id,
                "user_id": owner_id,
                "key": key,
                "size": len(file_data),
            },
        )

        try:
            self._s3.put_object(
                key=key,
                body=file_data,
                content_type=mime_type,
                metadata={
                    "image_id": image_id,
                    "user_id": owner_id,
                },
            )
        except (ClientError, BotoCoreError) as exc:
            logger.error("S3 upload failed", extra={"key": key})
            raise UploadError(
                message="Unable to upload image at this time",
                details={"image_id": image_id},
            ) from exc

        logger.info("Image uploaded successfully", extra={"key": key})

        return StoredObject(
            url=self.public_url(key),
            key=key,
            size=len(file_data),
            format=extension_for(mime_type),
        )

    def remove_image(self, *, key: str) -> None:
        """Delete an image object from S3."""
        logger.debug("Deleting image", extra={"key": key})

        try:
            self._s3.delete_object(key=key)
        except (ClientError, BotoCoreError) as exc:
            logger.error("S3 deletion failed", extra={"key": key})
            raise StorageDeleteError(
                message="Unable to delete image at this time",
                details={"key": key},
            ) from exc

        logger.info("Image deleted successfully", extra={"key": key})

    def iter_keys(self) -> Iterator[str]:
        """Yield every key under the image prefix."""
        try:
            yield from self._s3.list_keys(prefix=f"{self._prefix}/")
        except (ClientError, BotoCoreError) as exc:
            logger.error("S3 listing failed", extra={"prefix": self._prefix})
            raise StorageError(message="Unable to list stored images") from exc
