#!/usr/bin/env python3
"""
Reconcile stored image objects against image metadata.

An upload whose metadata write failed leaves its object behind in the
bucket. This script lists every object under the configured key prefix and
reports (default) or deletes (``--delete``) the ones no image record points
at. Configuration is read from the environment, like the Lambda functions.

Run:
    python seed/cleanup_orphans.py
    python seed/cleanup_orphans.py --delete
"""

import argparse
import sys
from dataclasses import dataclass, field

from aws_lambda_powertools import Logger

from core.config import Settings, get_settings
from core.infrastructure.adapters.dynamodb_adapter import DynamoDBAdapter
from core.infrastructure.adapters.s3_adapter import S3Adapter
from core.infrastructure.aws.dynamodb_images import DynamoDBImages
from core.infrastructure.aws.s3_image_storage import S3ImageStorage
from core.models.errors import OrganizerError
from core.repositories.image_repository import ImageMetadataRepository
from core.repositories.storage_repository import ImageStorageRepository

logger = Logger(service="cleanup")


@dataclass
class SweepReport:
    scanned: int = 0
    orphans: list[str] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Find stored images without metadata")

    parser.add_argument(
        "--delete",
        action="store_true",
        help="Delete orphaned objects instead of only reporting them",
    )

    return parser.parse_args()


def sweep_orphans(
    *,
    images: ImageMetadataRepository,
    storage: ImageStorageRepository,
    delete: bool = False,
) -> SweepReport:
    """Compare stored keys with recorded keys, optionally removing orphans."""
    report = SweepReport()
    known_keys = set(images.iter_storage_keys())

    for key in storage.iter_keys():
        report.scanned += 1

        if key in known_keys:
            continue

        report.orphans.append(key)
        logger.info("Orphaned object found", extra={"key": key})

        if not delete:
            continue

        try:
            storage.remove_image(key=key)
            report.deleted.append(key)
        except OrganizerError:
            logger.exception("Failed to delete orphaned object", extra={"key": key})
            report.failed.append(key)

    return report


def build_repositories(settings: Settings) -> tuple[ImageMetadataRepository, ImageStorageRepository]:
    images = DynamoDBImages(DynamoDBAdapter(settings.images_table_name, settings=settings))
    storage = S3ImageStorage(
        S3Adapter(settings=settings),
        key_prefix=settings.image_key_prefix,
        public_base_url=settings.image_public_base_url,
    )
    return images, storage


def cleanup_orphans() -> None:
    try:
        args = parse_args()
        images, storage = build_repositories(get_settings())

        logger.info("Starting orphan sweep", extra={"delete": args.delete})
        report = sweep_orphans(images=images, storage=storage, delete=args.delete)

        logger.info(
            "Orphan sweep completed",
            extra={
                "scanned": report.scanned,
                "orphans": len(report.orphans),
                "deleted": len(report.deleted),
                "failed": len(report.failed),
            },
        )

        if report.failed:
            sys.exit(1)

    except Exception as exc:
        logger.exception("Orphan sweep failed", exc_info=exc)
        sys.exit(1)


if __name__ == "__main__":
    cleanup_orphans()
