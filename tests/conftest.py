"""
Pytest configuration and fixtures for image-organizer tests.
Provides AWS mocking, the three DynamoDB tables, the S3 bucket and
auth helpers with proper cleanup.
"""

import base64
import json
import os
from collections.abc import Callable, Iterator
from types import SimpleNamespace
from typing import Any
from uuid import uuid4

import boto3
import pytest
from moto import mock_aws

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("AWS_REGION", "us-east-1")
os.environ.setdefault("AWS_DEFAULT_REGION", "us-east-1")
os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")
os.environ.setdefault("USERS_TABLE_NAME", "test-organizer-users")
os.environ.setdefault("FOLDERS_TABLE_NAME", "test-organizer-folders")
os.environ.setdefault("IMAGES_TABLE_NAME", "test-organizer-images")
os.environ.setdefault("IMAGE_BUCKET_NAME", "test-organizer-bucket")
os.environ.setdefault("JWT_SECRET", "test-signing-secret")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("POWERTOOLS_TRACE_DISABLED", "true")
os.environ.setdefault("POWERTOOLS_METRICS_NAMESPACE", "ImageOrganizer")

from core.config import Settings, get_settings  # noqa: E402
from core.security.tokens import issue_token  # noqa: E402


@pytest.fixture(autouse=True)
def fresh_settings() -> Iterator[None]:
    """Settings are cached per process; reload them around every test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings() -> Settings:
    return get_settings()


@pytest.fixture(scope="function")
def aws_mock(monkeypatch):
    # An endpoint override would route boto3 around moto
    monkeypatch.delenv("AWS_ENDPOINT_URL", raising=False)
    get_settings.cache_clear()

    with mock_aws():
        yield


@pytest.fixture(scope="function")
def dynamodb_resource(aws_mock):
    return boto3.resource("dynamodb", region_name=os.getenv("AWS_REGION"))


@pytest.fixture(scope="function")
def s3_client(aws_mock):
    """S3 client for bucket operations."""
    return boto3.client("s3", region_name=os.getenv("AWS_REGION"))


def _create_users_table(dynamodb_resource, table_name: str):
    return dynamodb_resource.create_table(
        TableName=table_name,
        BillingMode="PAY_PER_REQUEST",
        KeySchema=[{"AttributeName": "user_id", "KeyType": "HASH"}],
        AttributeDefinitions=[{"AttributeName": "user_id", "AttributeType": "S"}],
    )


def _create_folders_table(dynamodb_resource, table_name: str):
    return dynamodb_resource.create_table(
        TableName=table_name,
        BillingMode="PAY_PER_REQUEST",
        KeySchema=[{"AttributeName": "folder_id", "KeyType": "HASH"}],
        AttributeDefinitions=[
            {"AttributeName": "folder_id", "AttributeType": "S"},
            {"AttributeName": "user_id", "AttributeType": "S"},
            {"AttributeName": "parent_key", "AttributeType": "S"},
        ],
        GlobalSecondaryIndexes=[
            {
                "IndexName": "user-parent-index",
                "KeySchema": [
                    {"AttributeName": "user_id", "KeyType": "HASH"},
                    {"AttributeName": "parent_key", "KeyType": "RANGE"},
                ],
                "Projection": {"ProjectionType": "ALL"},
            },
        ],
    )


def _create_images_table(dynamodb_resource, table_name: str):
    return dynamodb_resource.create_table(
        TableName=table_name,
        BillingMode="PAY_PER_REQUEST",
        KeySchema=[{"AttributeName": "image_id", "KeyType": "HASH"}],
        AttributeDefinitions=[
            {"AttributeName": "image_id", "AttributeType": "S"},
            {"AttributeName": "user_id", "AttributeType": "S"},
            {"AttributeName": "folder_key", "AttributeType": "S"},
            {"AttributeName": "created_at", "AttributeType": "S"},
        ],
        GlobalSecondaryIndexes=[
            {
                "IndexName": "user-created-index",
                "KeySchema": [
                    {"AttributeName": "user_id", "KeyType": "HASH"},
                    {"AttributeName": "created_at", "KeyType": "RANGE"},
                ],
                "Projection": {"ProjectionType": "ALL"},
            },
            {
                "IndexName": "folder-created-index",
                "KeySchema": [
                    {"AttributeName": "folder_key", "KeyType": "HASH"},
                    {"AttributeName": "created_at", "KeyType": "RANGE"},
                ],
                "Projection": {"ProjectionType": "ALL"},
            },
        ],
    )


@pytest.fixture(scope="function")
def dynamodb_tables(dynamodb_resource, settings):
    """
    Create the users, folders and images tables for testing.

    moto discards every table when the mock context exits.
    """
    tables = SimpleNamespace(
        users=_create_users_table(dynamodb_resource, settings.users_table_name),
        folders=_create_folders_table(dynamodb_resource, settings.folders_table_name),
        images=_create_images_table(dynamodb_resource, settings.images_table_name),
    )

    for table in (tables.users, tables.folders, tables.images):
        table.wait_until_exists()

    return tables


@pytest.fixture(scope="function")
def s3_bucket(s3_client, settings):
    """Create the image bucket; yields the S3 client."""
    s3_client.create_bucket(Bucket=settings.image_bucket_name)
    return s3_client


@pytest.fixture(scope="function")
def aws_resources(dynamodb_tables, s3_bucket):
    """Every table plus the bucket."""
    return SimpleNamespace(tables=dynamodb_tables, s3=s3_bucket)


@pytest.fixture
def s3_keys(s3_bucket, settings) -> Callable[[], list[str]]:
    """
    Helper listing every object key in the image bucket.

    Usage:
        assert s3_keys() == ["organizer/usr_1/root/img_1.png"]
    """

    def _keys() -> list[str]:
        response: dict[str, Any] = s3_bucket.list_objects_v2(Bucket=settings.image_bucket_name)
        return [obj["Key"] for obj in response.get("Contents", [])]

    return _keys


@pytest.fixture
def make_token(settings) -> Callable[[str], str]:
    """
    Helper signing a bearer token for a user id.

    Usage:
        headers = {"Authorization": f"Bearer {make_token('usr_1')}"}
    """

    def _make(user_id: str) -> str:
        return issue_token(user_id, settings=settings)

    return _make


@pytest.fixture
def sample_image_binary() -> bytes:
    """Sample binary image data (1x1 PNG)."""
    png_base64 = "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNk+M9QDwADhgGAWjR9awAAAABJRU5ErkJggg=="
    return base64.b64decode(png_base64)


@pytest.fixture
def sample_jpeg_binary() -> bytes:
    """Sample binary JPEG data (minimal valid JPEG)."""
    return (
        b"\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00"
        b"\xff\xdb\x00C\x00\x08\x06\x06\x07\x06\x05\x08\x07\x07\x07\t\t\x08\n\x0c"
        b"\x14\r\x0c\x0b\x0b\x0c\x19\x12\x13\x0f\x14\x1d\x1a\x1f\x1e\x1d\x1a\x1c"
        b"\x1c $.' \",#\x1c\x1c(7),01444\x1f'9=82<.342\xff\xc0\x00\x0b\x08"
        b"\x00\x01\x00\x01\x01\x01\x11\x00\xff\xc4\x00\x14\x00\x01\x00\x00\x00"
        b"\x00\x00\x00\x00\x00\x00\x00\x00\x00\x00\x00\x00\t\xff\xc4\x00\x14\x10"
        b"\x01\x00\x00\x00\x00\x00\x00\x00\x00\x00\x00\x00\x00\x00\x00\x00\x00"
        b"\xff\xda\x00\x08\x01\x01\x00\x00?\x00\x7f\x00\xff\xd9"
    )


@pytest.fixture
def sample_webp_binary() -> bytes:
    """RIFF/WEBP header followed by filler bytes."""
    return b"RIFF\x24\x00\x00\x00WEBPVP8 " + b"\x00" * 24


# ============================================================================
# Lambda / API Gateway fixtures
# ============================================================================


@pytest.fixture
def lambda_context():
    return SimpleNamespace(
        aws_request_id="test-request-id",
        function_name="test-function",
        memory_limit_in_mb=256,
        invoked_function_arn="arn:aws:lambda:us-east-1:000000000000:function:test",
        log_group_name="/aws/lambda/test-function",
        log_stream_name="2024/01/01/[$LATEST]test",
        get_remaining_time_in_millis=lambda: 30000,
    )


@pytest.fixture
def api_event(make_token) -> Callable[..., dict[str, Any]]:
    """
    Build a synthetic API Gateway proxy event.

    Usage:
        event = api_event("POST", "/folders", body={"name": "A"}, user_id="usr_1")
    """

    def _event(
        method: str,
        path: str,
        *,
        body: Any = None,
        user_id: str | None = None,
        path_params: dict[str, str] | None = None,
        query: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        event_headers: dict[str, str] = {"Content-Type": "application/json"}
        if user_id is not None:
            event_headers["Authorization"] = f"Bearer {make_token(user_id)}"
        event_headers.update(headers or {})

        return {
            "httpMethod": method,
            "path": path,
            "headers": event_headers,
            "pathParameters": path_params,
            "queryStringParameters": query,
            "body": json.dumps(body) if isinstance(body, dict) else body,
            "isBase64Encoded": False,
        }

    return _event


@pytest.fixture
def multipart_event(make_token) -> Callable[..., dict[str, Any]]:
    """
    Build a base64-encoded ``multipart/form-data`` upload event, the way
    API Gateway delivers binary media types.
    """

    def _event(
        *,
        user_id: str,
        file_data: bytes | None,
        filename: str = "upload.png",
        content_type: str = "image/png",
        fields: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        boundary = f"----boundary{uuid4().hex}"
        parts: list[bytes] = []

        for name, value in (fields or {}).items():
            parts.append(
                f'--{boundary}\r\nContent-Disposition: form-data; name="{name}"\r\n\r\n{value}\r\n'.encode()
            )

        if file_data is not None:
            parts.append(
                (
                    f"--{boundary}\r\n"
                    f'Content-Disposition: form-data; name="image"; filename="{filename}"\r\n'
                    f"Content-Type: {content_type}\r\n\r\n"
                ).encode()
                + file_data
                + b"\r\n"
            )

        body = b"".join(parts) + f"--{boundary}--\r\n".encode()

        return {
            "httpMethod": "POST",
            "path": "/images/upload",
            "headers": {
                "content-type": f"multipart/form-data; boundary={boundary}",
                "authorization": f"Bearer {make_token(user_id)}",
            },
            "pathParameters": None,
            "queryStringParameters": None,
            "body": base64.b64encode(body).decode("ascii"),
            "isBase64Encoded": True,
        }

    return _event


