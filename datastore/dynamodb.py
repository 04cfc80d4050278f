"""Reading table backed by a real DynamoDB table through boto3."""

from __future__ import annotations

from decimal import Decimal, DecimalException
from typing import Any, Dict, Iterable, List, Optional

import boto3
from boto3.dynamodb.conditions import Attr, Key
from botocore.exceptions import BotoCoreError, ClientError

from datastore.errors import StoreReadError, StoreWriteError

Item = Dict[str, Any]

# Raised by boto3 before any request is sent: TypeError for NaN/Infinity,
# DecimalException for numbers outside DynamoDB's range.
_BACKEND_ERRORS = (BotoCoreError, ClientError, TypeError, DecimalException)


def to_dynamodb(value: Any) -> Any:
    """Convert floats (recursively) into ``Decimal``; boto3 rejects ``float``."""
    if isinstance(value, bool):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, dict):
        return {key: to_dynamodb(inner) for key, inner in value.items()}
    if isinstance(value, list):
        return [to_dynamodb(inner) for inner in value]
    return value


def from_dynamodb(value: Any) -> Any:
    """Turn ``Decimal`` numbers back into ``int`` or ``float``."""
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, dict):
        return {key: from_dynamodb(inner) for key, inner in value.items()}
    if isinstance(value, list):
        return [from_dynamodb(inner) for inner in value]
    return value


class DynamoDBTable:
    """Composite-key table adapter with the same surface as ``MockDynamoDBTable``."""

    def __init__(
        self,
        name: str,
        region: str,
        partition_key: str = "deviceId",
        sort_key: str = "timestamp",
        resource: Any = None,
    ) -> None:
        self.name = name
        self.region = region
        self.partition_key = partition_key
        self.sort_key = sort_key
        dynamodb = resource or boto3.resource("dynamodb", region_name=region)
        self._table = dynamodb.Table(name)

    def put_item(self, item: Item) -> None:
        try:
            self._table.put_item(Item=to_dynamodb(item))
        except _BACKEND_ERRORS as exc:
            raise StoreWriteError(str(exc)) from exc

    def query(
        self,
        partition_value: str,
        sort_min: Any = None,
        limit: Optional[int] = None,
        descending: bool = True,
    ) -> List[Item]:
        try:
            condition = Key(self.partition_key).eq(partition_value)
            if sort_min is not None:
                condition = condition & Key(self.sort_key).gte(to_dynamodb(sort_min))
            query_kwargs: Dict[str, Any] = {
                "KeyConditionExpression": condition,
                "ScanIndexForward": not descending,
            }
            if limit is not None:
                query_kwargs["Limit"] = limit
            response = self._table.query(**query_kwargs)
        except _BACKEND_ERRORS as exc:
            raise StoreReadError(str(exc)) from exc
        return [from_dynamodb(item) for item in response.get("Items", [])]

    def scan(
        self,
        sort_min: Any = None,
        projection: Optional[Iterable[str]] = None,
        limit: Optional[int] = None,
    ) -> List[Item]:
        scan_kwargs: Dict[str, Any] = {}
        if projection is not None:
            names = {f"#p{index}": field for index, field in enumerate(projection)}
            scan_kwargs["ProjectionExpression"] = ", ".join(names)
            scan_kwargs["ExpressionAttributeNames"] = names
        if limit is not None:
            scan_kwargs["Limit"] = limit

        items: List[Item] = []
        try:
            if sort_min is not None:
                scan_kwargs["FilterExpression"] = Attr(self.sort_key).gte(to_dynamodb(sort_min))
            while True:
                response = self._table.scan(**scan_kwargs)
                items.extend(from_dynamodb(item) for item in response.get("Items", []))
                last_key = response.get("LastEvaluatedKey")
                if last_key is None or limit is not None:
                    break
                scan_kwargs["ExclusiveStartKey"] = last_key
        except _BACKEND_ERRORS as exc:
            raise StoreReadError(str(exc)) from exc
        return items
