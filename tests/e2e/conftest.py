"""
Fixtures for end-to-end tests against a LocalStack deployment.
"""

import base64
import logging
from uuid import uuid4

import boto3
from botocore.exceptions import BotoCoreError, ClientError
import pytest

from e2e_api_client import E2EAPIClient

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)

STAGE = "snd"
ENDPOINT_BASE_URL = "http://localhost:4566"
S3_IMAGE_BUCKET_NAME = "image-organizer-images"

# table name -> partition key
DYNAMODB_TABLES = {
    "image-organizer-users": "user_id",
    "image-organizer-folders": "folder_id",
    "image-organizer-images": "image_id",
}

# ============================================================================
# API Details Fixture
# ============================================================================


@pytest.fixture(scope="session")
def api_details():
    """Get API Gateway details from LocalStack"""
    try:
        apigateway = boto3.client("apigateway", endpoint_url=ENDPOINT_BASE_URL)

        apis = apigateway.get_rest_apis()
        api = next(api for api in apis["items"] if "image-organizer" in api["name"])
        api_id = api["id"]

        endpoint = f"{ENDPOINT_BASE_URL}/restapis/{api_id}/{STAGE}/_user_request_"

        return {"api_id": api_id, "endpoint": endpoint, "stage": STAGE}
    except (BotoCoreError, ClientError, StopIteration) as e:
        logger.warning("Could not get API details from LocalStack: %s", e)
        pytest.skip(f"Could not get API details from LocalStack: {e}")


@pytest.fixture(scope="session")
def api_headers():
    """Default HTTP headers for API requests"""
    return {"Content-Type": "application/json"}


@pytest.fixture
def api_client(api_details, api_headers):
    """Anonymous HTTP client wrapper for E2E API testing"""
    return E2EAPIClient(api_details["endpoint"], api_headers)


@pytest.fixture(scope="function", autouse=True)
def cleanup_storage_after_each_test(api_details):
    """Clean S3 and DynamoDB to prevent test data leakage."""
    yield
    _cleanup_s3()
    for table_name, key_name in DYNAMODB_TABLES.items():
        _cleanup_dynamodb(table_name, key_name)


def _cleanup_s3():
    """Clean all objects from S3 bucket"""
    logger.info("Cleaning S3 bucket: %s", S3_IMAGE_BUCKET_NAME)

    s3_client = boto3.client("s3", endpoint_url=ENDPOINT_BASE_URL)
    paginator = s3_client.get_paginator("list_objects_v2")

    try:
        deleted = 0
        for page in paginator.paginate(Bucket=S3_IMAGE_BUCKET_NAME):
            for obj in page.get("Contents", []):
                s3_client.delete_object(Bucket=S3_IMAGE_BUCKET_NAME, Key=obj["Key"])
                deleted += 1

        logger.info("Deleted %d objects from S3 bucket", deleted)

    except ClientError as err:
        logger.error("Failed to cleanup S3 bucket: %s", S3_IMAGE_BUCKET_NAME, exc_info=err)


def _cleanup_dynamodb(table_name, key_name):
    """Delete every item, markers included, from one table."""
    logger.info("Cleaning DynamoDB table: %s", table_name)

    dynamodb = boto3.resource("dynamodb", endpoint_url=ENDPOINT_BASE_URL)
    table = dynamodb.Table(table_name)

    try:
        deleted = 0
        start_key = None

        while True:
            scan_kwargs = {"ProjectionExpression": key_name}
            if start_key:
                scan_kwargs["ExclusiveStartKey"] = start_key

            response = table.scan(**scan_kwargs)

            for item in response.get("Items", []):
                table.delete_item(Key={key_name: item[key_name]})
                deleted += 1

            start_key = response.get("LastEvaluatedKey")
            if not start_key:
                break

        logger.info("Deleted %d items from DynamoDB table %s", deleted, table_name)

    except ClientError as err:
        logger.error("Failed to cleanup DynamoDB table: %s", table_name, exc_info=err)


# ============================================================================
# Users
# ============================================================================


@pytest.fixture
def signup(api_client):
    """Sign up a fresh user and return a client carrying their token."""

    def _signup(name="E2E User"):
        payload = {
            "name": name,
            "email": f"e2e-{uuid4().hex[:8]}@example.com",
            "password": "e2e-password",
        }
        response = api_client.post("/auth/signup", payload)
        assert response.status_code == 201, response.text
        return api_client.with_token(response.json()["token"])

    return _signup


@pytest.fixture
def user_client(signup):
    return signup()


# ============================================================================
# Sample Image Data
# ============================================================================

SAMPLE_PNG_BASE64 = (
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNk+M9QDwADhgGAWjR9awAAAABJRU5ErkJggg=="
)


@pytest.fixture
def sample_png_binary() -> bytes:
    return base64.b64decode(SAMPLE_PNG_BASE64)


@pytest.fixture
def upload_valid_payload() -> dict:
    return {
        "file": SAMPLE_PNG_BASE64,
        "file_name": "sample.png",
        "tags": "test, sample",
    }
