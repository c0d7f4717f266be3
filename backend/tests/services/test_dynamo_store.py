"""DynamoDB Key-Value Store — request shapes and error mapping against a fake boto3 client.

Tests cover:
    - Attribute mapping (id <-> ID, title <-> Title, ...)
    - Scan cursor round-trips through ExclusiveStartKey / LastEvaluatedKey
    - UpdateItem is conditional on attribute_exists(ID) and returns ALL_NEW
    - ClientError / BotoCoreError surface as StorageError
    - build_dynamodb_client honours region and endpoint override
"""

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from app.core.errors import StorageError
from app.infrastructure.dynamo_store import (
    DynamoKeyValueStore, build_dynamodb_client, from_attribute_map, to_attribute_map,
)


class _FakeDynamoClient:
    """Records calls; responses/errors configured per method name."""

    def __init__(self):
        self.calls: list[tuple[str, dict]] = []
        self.responses: dict[str, dict] = {}
        self.errors: dict[str, Exception] = {}

    def _handle(self, method: str, kwargs: dict) -> dict:
        self.calls.append((method, kwargs))
        if method in self.errors:
            raise self.errors[method]
        return self.responses.get(method, {})

    def scan(self, **kwargs):
        return self._handle("scan", kwargs)

    def get_item(self, **kwargs):
        return self._handle("get_item", kwargs)

    def put_item(self, **kwargs):
        return self._handle("put_item", kwargs)

    def update_item(self, **kwargs):
        return self._handle("update_item", kwargs)

    def delete_item(self, **kwargs):
        return self._handle("delete_item", kwargs)

    def describe_table(self, **kwargs):
        return self._handle("describe_table", kwargs)


def _client_error(code: str, operation: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


def _raw(key: str, title: str = "Title") -> dict:
    return {
        "ID": {"S": key}, "Title": {"S": title},
        "Content": {"S": "c"}, "Author": {"S": "a"},
    }


@pytest.fixture
def client():
    return _FakeDynamoClient()


@pytest.fixture
def dynamo_store(client):
    return DynamoKeyValueStore(client, "Posts")


def test_attribute_mapping_round_trip():
    item = {"id": "k1", "title": "Title", "content": "c", "author": "a"}
    assert to_attribute_map(item) == _raw("k1")
    assert from_attribute_map(_raw("k1")) == item


async def test_scan_first_call_has_no_start_key(dynamo_store, client):
    client.responses["scan"] = {
        "Items": [_raw("k1"), _raw("k2")],
        "LastEvaluatedKey": {"ID": {"S": "k2"}},
    }
    batch = await dynamo_store.scan(None, 2)
    method, kwargs = client.calls[0]
    assert method == "scan"
    assert kwargs == {"TableName": "Posts", "Limit": 2}
    assert [i["id"] for i in batch.items] == ["k1", "k2"]
    assert batch.next_cursor == "k2"


async def test_scan_resumes_from_cursor(dynamo_store, client):
    client.responses["scan"] = {"Items": [_raw("k3")]}
    batch = await dynamo_store.scan("k2", 2)
    assert client.calls[0][1]["ExclusiveStartKey"] == {"ID": {"S": "k2"}}
    assert batch.next_cursor is None


async def test_get_item_absent(dynamo_store, client):
    client.responses["get_item"] = {}
    result = await dynamo_store.get_item("k1")
    assert not result.is_found
    assert client.calls[0][1]["Key"] == {"ID": {"S": "k1"}}


async def test_get_item_found(dynamo_store, client):
    client.responses["get_item"] = {"Item": _raw("k1")}
    result = await dynamo_store.get_item("k1")
    assert result.item["title"] == "Title"


async def test_put_item_marshals_attributes(dynamo_store, client):
    await dynamo_store.put_item({"id": "k1", "title": "Title", "content": "c", "author": "a"})
    assert client.calls[0] == ("put_item", {"TableName": "Posts", "Item": _raw("k1")})


async def test_update_item_is_conditional(dynamo_store, client):
    client.responses["update_item"] = {"Attributes": _raw("k1", "Renamed")}
    stored = await dynamo_store.update_item(
        "k1", {"title": "Renamed", "content": "c", "author": "a"},
    )
    kwargs = client.calls[0][1]
    assert kwargs["ConditionExpression"] == "attribute_exists(ID)"
    assert kwargs["ReturnValues"] == "ALL_NEW"
    assert kwargs["UpdateExpression"] == (
        "SET #title = :title, #content = :content, #author = :author"
    )
    assert kwargs["ExpressionAttributeNames"]["#title"] == "Title"
    assert kwargs["ExpressionAttributeValues"][":title"] == {"S": "Renamed"}
    assert stored["title"] == "Renamed"


async def test_update_condition_failure_is_storage_error(dynamo_store, client):
    client.errors["update_item"] = _client_error(
        "ConditionalCheckFailedException", "UpdateItem",
    )
    with pytest.raises(StorageError) as exc_info:
        await dynamo_store.update_item("gone", {"title": "Renamed"})
    assert exc_info.value.operation == "update"


async def test_client_error_is_storage_error(dynamo_store, client):
    client.errors["scan"] = _client_error("ProvisionedThroughputExceededException", "Scan")
    with pytest.raises(StorageError) as exc_info:
        await dynamo_store.scan(None, 10)
    assert "ProvisionedThroughputExceededException" in exc_info.value.message


async def test_connection_error_is_storage_error(dynamo_store, client):
    client.errors["get_item"] = EndpointConnectionError(endpoint_url="http://localhost:8000")
    with pytest.raises(StorageError):
        await dynamo_store.get_item("k1")


async def test_health_check_reports_unreachable_table(dynamo_store, client):
    assert await dynamo_store.health_check() is True
    client.errors["describe_table"] = _client_error("ResourceNotFoundException", "DescribeTable")
    assert await dynamo_store.health_check() is False


def test_client_uses_region_and_local_endpoint():
    client = build_dynamodb_client("eu-west-1", "http://localhost:8000")
    assert client.meta.region_name == "eu-west-1"
    assert client.meta.endpoint_url == "http://localhost:8000"
    assert client.meta.service_model.service_name == "dynamodb"
