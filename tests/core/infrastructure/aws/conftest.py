import pytest

from core.infrastructure.adapters.dynamodb_adapter import DynamoDBAdapter


@pytest.fixture
def users_adapter(dynamodb_tables, settings) -> DynamoDBAdapter:
    return DynamoDBAdapter(settings.users_table_name, settings=settings)


@pytest.fixture
def folders_adapter(dynamodb_tables, settings) -> DynamoDBAdapter:
    return DynamoDBAdapter(settings.folders_table_name, settings=settings)


@pytest.fixture
def images_adapter(dynamodb_tables, settings) -> DynamoDBAdapter:
    return DynamoDBAdapter(settings.images_table_name, settings=settings)
