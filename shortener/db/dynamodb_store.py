"""
DynamoDB Mapping Store

MappingStore on an existing DynamoDB table (partition key: short_code, type S).
The table is provisioned outside this service.

Atomic primitives:
- Conditional put: put_item with attribute_not_exists(short_code); a failed
  condition means the code is taken
- Counter increment: update_item with an ADD expression, guarded by
  attribute_exists(short_code) so a missing code is not silently created

boto3 is blocking, so every call runs in the Starlette threadpool.
"""

import logging
from typing import Any, Dict, Optional

import boto3
from boto3.dynamodb.types import TypeDeserializer, TypeSerializer
from botocore.exceptions import BotoCoreError, ClientError
from pydantic import ValidationError as ModelValidationError
from starlette.concurrency import run_in_threadpool

from shortener.core.exceptions import CodeCollisionError, ShortCodeNotFoundError, StorageError
from shortener.db.models import CLICK_COUNT_FIELD, ShortUrlMapping
from shortener.db.store import CounterUpdate, MappingStore

logger = logging.getLogger(__name__)

CONDITIONAL_CHECK_FAILED = "ConditionalCheckFailedException"

_serializer = TypeSerializer()
_deserializer = TypeDeserializer()


class DynamoDBMappingStore(MappingStore):
    """Mapping store on a DynamoDB table, using the low-level client."""

    def __init__(self, client: Any, table_name: str):
        self.client = client
        self.table_name = table_name

    @classmethod
    def from_region(
        cls,
        table_name: str,
        region_name: str,
        endpoint_url: Optional[str] = None,
    ) -> "DynamoDBMappingStore":
        client = boto3.client("dynamodb", region_name=region_name, endpoint_url=endpoint_url)
        return cls(client, table_name)

    async def put(self, mapping: ShortUrlMapping, if_absent: bool = True) -> None:
        request: Dict[str, Any] = {
            "TableName": self.table_name,
            "Item": {
                key: _serializer.serialize(value)
                for key, value in mapping.model_dump(exclude_none=True).items()
            },
        }
        if if_absent:
            request["ConditionExpression"] = "attribute_not_exists(short_code)"

        try:
            await run_in_threadpool(self.client.put_item, **request)
        except ClientError as e:
            if e.response["Error"]["Code"] == CONDITIONAL_CHECK_FAILED:
                raise CodeCollisionError(mapping.short_code) from e
            logger.error(f"Failed to write short code {mapping.short_code}: {e}", exc_info=True)
            raise StorageError(f"Failed to write short code '{mapping.short_code}'", original_error=e)
        except BotoCoreError as e:
            logger.error(f"Failed to write short code {mapping.short_code}: {e}", exc_info=True)
            raise StorageError(f"Failed to write short code '{mapping.short_code}'", original_error=e)

    async def get(self, short_code: str) -> ShortUrlMapping:
        try:
            response = await run_in_threadpool(
                self.client.get_item,
                TableName=self.table_name,
                Key={"short_code": {"S": short_code}},
                ConsistentRead=True,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to read short code {short_code}: {e}", exc_info=True)
            raise StorageError(f"Failed to read short code '{short_code}'", original_error=e)

        item = response.get("Item")
        if not item:
            raise ShortCodeNotFoundError(short_code)

        record = {key: _deserializer.deserialize(value) for key, value in item.items()}
        try:
            for key in ("created_at", "expires_at", CLICK_COUNT_FIELD):
                if record.get(key) is not None:
                    record[key] = int(record[key])
            return ShortUrlMapping.model_validate(record)
        except (ModelValidationError, TypeError, ValueError) as e:
            logger.error(f"Malformed item for short code {short_code}: {e}")
            raise StorageError(f"Malformed record for short code '{short_code}'", original_error=e)

    async def increment_counter(
        self,
        short_code: str,
        field: str = CLICK_COUNT_FIELD,
        delta: int = 1,
    ) -> CounterUpdate:
        try:
            await run_in_threadpool(
                self.client.update_item,
                TableName=self.table_name,
                Key={"short_code": {"S": short_code}},
                UpdateExpression="ADD #counter :delta",
                ConditionExpression="attribute_exists(short_code)",
                ExpressionAttributeNames={"#counter": field},
                ExpressionAttributeValues={":delta": {"N": str(delta)}},
            )
        except ClientError as e:
            if e.response["Error"]["Code"] == CONDITIONAL_CHECK_FAILED:
                return CounterUpdate(short_code, applied=False, error="short code not found")
            return CounterUpdate(short_code, applied=False, error=str(e))
        except BotoCoreError as e:
            return CounterUpdate(short_code, applied=False, error=str(e))
        return CounterUpdate(short_code, applied=True)
