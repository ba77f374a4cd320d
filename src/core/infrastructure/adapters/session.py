"""boto3 connection options shared by the adapters."""

from typing import Any

from botocore.config import Config

from core.config import Settings

RETRY_POLICY = {"max_attempts": 3, "mode": "standard"}


def connection_options(settings: Settings, *, timeout_seconds: int | None = None) -> dict[str, Any]:
    """Keyword arguments for ``boto3.client``/``boto3.resource``.

    ``aws_endpoint_url`` routes every call to LocalStack when set.
    """
    config = Config(retries=RETRY_POLICY)
    if timeout_seconds is not None:
        config = config.merge(Config(connect_timeout=timeout_seconds, read_timeout=timeout_seconds))

    return {
        "endpoint_url": settings.aws_endpoint_url,
        "region_name": settings.aws_region,
        "config": config,
    }
