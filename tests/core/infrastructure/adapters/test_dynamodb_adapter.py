import pytest
from botocore.exceptions import ClientError

from core.infrastructure.adapters.dynamodb_adapter import (
    DynamoDBAdapter,
    is_conditional_check_failure,
)


class TestDynamoDBAdapter:
    def test_init_requires_table_name(self, settings) -> None:
        with pytest.raises(RuntimeError):
            DynamoDBAdapter("", settings=settings)

    def test_put_and_get_item(self, dynamodb_tables, settings) -> None:
        adapter = DynamoDBAdapter(settings.images_table_name, settings=settings)

        adapter.put_item(item={"image_id": "img_1", "user_id": "usr_1"})
        response = adapter.get_item(key={"image_id": "img_1"}, consistent_read=True)

        assert response["Item"] == {"image_id": "img_1", "user_id": "usr_1"}

    def test_condition_expression_failure(self, dynamodb_tables, settings) -> None:
        adapter = DynamoDBAdapter(settings.images_table_name, settings=settings)
        item = {"image_id": "img_cond"}

        adapter.put_item(item=item, condition_expression="attribute_not_exists(image_id)")

        with pytest.raises(ClientError) as exc_info:
            adapter.put_item(item=item, condition_expression="attribute_not_exists(image_id)")

        assert is_conditional_check_failure(exc_info.value)

    def test_delete_item(self, dynamodb_tables, settings) -> None:
        adapter = DynamoDBAdapter(settings.images_table_name, settings=settings)

        adapter.put_item(item={"image_id": "img_del"})
        adapter.delete_item(key={"image_id": "img_del"})

        assert "Item" not in adapter.get_item(key={"image_id": "img_del"})

    def test_update_item(self, dynamodb_tables, settings) -> None:
        adapter = DynamoDBAdapter(settings.users_table_name, settings=settings)
        adapter.put_item(item={"user_id": "usr_1", "name": "Ada"})

        adapter.update_item(
            key={"user_id": "usr_1"},
            UpdateExpression="SET #n = :name",
            ExpressionAttributeNames={"#n": "name"},
            ExpressionAttributeValues={":name": "Grace"},
        )

        assert adapter.get_item(key={"user_id": "usr_1"})["Item"]["name"] == "Grace"

    def test_query_and_scan(self, dynamodb_tables, settings) -> None:
        adapter = DynamoDBAdapter(settings.images_table_name, settings=settings)
        for n in (1, 2):
            adapter.put_item(
                item={
                    "image_id": f"img_{n}",
                    "user_id": "usr_1",
                    "created_at": f"2024-01-0{n}T10:00:00.000000+00:00",
                }
            )

        response = adapter.query(
            IndexName="user-created-index",
            KeyConditionExpression="user_id = :u",
            ExpressionAttributeValues={":u": "usr_1"},
            ScanIndexForward=False,
        )

        assert [item["image_id"] for item in response["Items"]] == ["img_2", "img_1"]
        assert adapter.scan()["Count"] == 2


class TestIsConditionalCheckFailure:
    def test_other_codes(self) -> None:
        exc = ClientError({"Error": {"Code": "ProvisionedThroughputExceededException"}}, "PutItem")

        assert not is_conditional_check_failure(exc)
