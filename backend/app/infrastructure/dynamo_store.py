"""DynamoDB Key-Value Store — the KeyValueStore contract over one DynamoDB table.

Invariants:
    - Table key attribute is "ID" (string); content attributes are Title, Content, Author
    - scan() passes LastEvaluatedKey back as ExclusiveStartKey; the cursor is the key's ID value
    - update_item() is conditional on attribute_exists(ID) and returns ALL_NEW
    - Every botocore failure surfaces as StorageError; nothing boto-specific leaves this module

Design Decisions:
    - boto3 low-level client run through asyncio.to_thread: blocking SDK calls never
      stall the event loop, and a cancelled request stops awaiting the thread
    - Conditional UpdateItem closes the check-then-update race on the store side
    - Client injectable for tests; built from settings (endpoint, region) otherwise
"""

import asyncio
import logging
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from app.core.domain_types import MUTABLE_FIELDS, ScanCursor
from app.core.errors import StorageError
from app.core.repository_protocols import LookupResult, ScanBatch

logger = logging.getLogger(__name__)

KEY_ATTRIBUTE = "ID"

# Post attribute -> DynamoDB attribute
_ATTRIBUTES = {
    "id": KEY_ATTRIBUTE,
    "title": "Title",
    "content": "Content",
    "author": "Author",
}


def to_attribute_map(item: dict) -> dict:
    return {
        _ATTRIBUTES[name]: {"S": str(value)}
        for name, value in item.items() if name in _ATTRIBUTES
    }


def from_attribute_map(attributes: dict) -> dict:
    return {
        name: attributes[attr]["S"]
        for name, attr in _ATTRIBUTES.items() if attr in attributes
    }


def _key(key: str) -> dict:
    return {KEY_ATTRIBUTE: {"S": key}}


def build_dynamodb_client(region: str, endpoint_url: str | None = None) -> Any:
    """Create a boto3 DynamoDB client (endpoint override for DynamoDB Local)."""
    return boto3.client("dynamodb", region_name=region, endpoint_url=endpoint_url)


class DynamoKeyValueStore:
    """KeyValueStore backed by a DynamoDB table."""

    def __init__(self, client: Any, table_name: str):
        self._client = client
        self._table = table_name

    async def _invoke(self, operation: str, method: str, **kwargs) -> dict:
        call = getattr(self._client, method)
        try:
            return await asyncio.to_thread(call, TableName=self._table, **kwargs)
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "Unknown")
            if code == "ConditionalCheckFailedException":
                key = kwargs.get("Key", {}).get(KEY_ATTRIBUTE, {}).get("S")
                logger.warning(f"Conditional {method} rejected: {key} no longer exists")
                raise StorageError(f"item {key} does not exist", operation)
            logger.error(f"DynamoDB {method} failed ({code}): {e}")
            raise StorageError(code, operation)
        except BotoCoreError as e:
            logger.error(f"DynamoDB {method} failed: {e}")
            raise StorageError("DynamoDB client error", operation)

    async def scan(self, cursor: ScanCursor | None, limit: int) -> ScanBatch:
        kwargs: dict = {"Limit": limit}
        if cursor is not None:
            kwargs["ExclusiveStartKey"] = _key(cursor)
        result = await self._invoke("scan", "scan", **kwargs)
        items = [from_attribute_map(raw) for raw in result.get("Items", [])]
        last_key = result.get("LastEvaluatedKey")
        next_cursor = ScanCursor(last_key[KEY_ATTRIBUTE]["S"]) if last_key else None
        return ScanBatch(items=items, next_cursor=next_cursor)

    async def get_item(self, key: str) -> LookupResult:
        result = await self._invoke("get", "get_item", Key=_key(key))
        raw = result.get("Item")
        if not raw:
            return LookupResult.absent()
        return LookupResult.found(from_attribute_map(raw))

    async def put_item(self, item: dict) -> None:
        await self._invoke("put", "put_item", Item=to_attribute_map(item))

    async def update_item(self, key: str, fields: dict) -> dict:
        names = [name for name in MUTABLE_FIELDS if name in fields]
        expression = ", ".join(f"#{name} = :{name}" for name in names)
        result = await self._invoke(
            "update", "update_item",
            Key=_key(key),
            UpdateExpression=f"SET {expression}",
            ConditionExpression=f"attribute_exists({KEY_ATTRIBUTE})",
            ExpressionAttributeNames={f"#{n}": _ATTRIBUTES[n] for n in names},
            ExpressionAttributeValues={f":{n}": {"S": fields[n]} for n in names},
            ReturnValues="ALL_NEW",
        )
        return from_attribute_map(result["Attributes"])

    async def delete_item(self, key: str) -> None:
        await self._invoke("delete", "delete_item", Key=_key(key))

    async def health_check(self) -> bool:
        try:
            await self._invoke("describe", "describe_table")
            return True
        except StorageError:
            return False

    async def close(self) -> None:
        self._client.close()
