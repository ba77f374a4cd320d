"""The image bucket behind a keyword-only, snake_case interface.

Like the DynamoDB adapter, this never handles errors; ``S3ImageStorage``
turns boto3 failures into storage errors.
"""

from collections.abc import Iterator
from typing import Any, Protocol

import boto3

from core.config import Settings
from core.infrastructure.adapters.session import connection_options


class S3AdapterProtocol(Protocol):
    """What the storage repository needs from the bucket."""

    bucket: str
    region: str

    def put_object(
        self,
        *,
        key: str,
        body: bytes,
        content_type: str,
        metadata: dict[str, str],
    ) -> None: ...

    def delete_object(self, *, key: str) -> None: ...

    def list_keys(self, *, prefix: str) -> Iterator[str]: ...


class S3Adapter:
    """boto3 S3 client bound to the configured image bucket.

    Calls use ``storage_timeout_seconds`` as connect and read timeout since
    the bucket is the slowest dependency of an upload.
    """

    def __init__(self, *, settings: Settings) -> None:
        if not settings.image_bucket_name:
            raise RuntimeError("Image bucket name is not configured")

        self.bucket = settings.image_bucket_name
        self.region = settings.aws_region
        self._client: Any = boto3.client(
            "s3",
            **connection_options(settings, timeout_seconds=settings.storage_timeout_seconds),
        )

    def put_object(
        self,
        *,
        key: str,
        body: bytes,
        content_type: str,
        metadata: dict[str, str],
    ) -> None:
        self._client.put_object(
            Bucket=self.bucket,
            Key=key,
            Body=body,
            ContentType=content_type,
            Metadata=metadata,
        )

    def delete_object(self, *, key: str) -> None:
        """Delete ``key``. S3 reports success for keys that do not exist."""
        self._client.delete_object(Bucket=self.bucket, Key=key)

    def list_keys(self, *, prefix: str) -> Iterator[str]:
        """Yield every key under ``prefix`` across result pages."""
        pages = self._client.get_paginator("list_objects_v2").paginate(Bucket=self.bucket, Prefix=prefix)

        for page in pages:
            yield from (obj["Key"] for obj in page.get("Contents", []))
