"""Tests for the boto3-backed table, using an in-memory stand-in for boto3's Table."""

from __future__ import annotations

import decimal
from decimal import Decimal
from typing import Any, Dict, List

import pytest
from botocore.exceptions import ClientError

from datastore.dynamodb import DynamoDBTable, from_dynamodb, to_dynamodb
from datastore.errors import StoreReadError, StoreWriteError


def _client_error(operation: str) -> ClientError:
    return ClientError(
        {"Error": {"Code": "ProvisionedThroughputExceededException", "Message": "slow down"}},
        operation,
    )


class StubTable:
    def __init__(
        self,
        pages: List[Dict[str, Any]] | None = None,
        fail: bool = False,
        error: Exception | None = None,
    ) -> None:
        self.pages = list(pages or [])
        self.fail = fail
        self.error = error
        self.calls: List[tuple[str, Dict[str, Any]]] = []

    def put_item(self, **kwargs: Any) -> None:
        self.calls.append(("put_item", kwargs))
        if self.error is not None:
            raise self.error
        if self.fail:
            raise _client_error("PutItem")

    def query(self, **kwargs: Any) -> Dict[str, Any]:
        self.calls.append(("query", kwargs))
        if self.error is not None:
            raise self.error
        if self.fail:
            raise _client_error("Query")
        return self.pages.pop(0)

    def scan(self, **kwargs: Any) -> Dict[str, Any]:
        self.calls.append(("scan", dict(kwargs)))
        if self.error is not None:
            raise self.error
        if self.fail:
            raise _client_error("Scan")
        return self.pages.pop(0)


class StubResource:
    def __init__(self, table: StubTable) -> None:
        self.table = table
        self.requested: str | None = None

    def Table(self, name: str) -> StubTable:  # noqa: N802 - mirrors boto3
        self.requested = name
        return self.table


def _table(stub: StubTable) -> DynamoDBTable:
    resource = StubResource(stub)
    table = DynamoDBTable(name="air-monitor-readings", region="us-east-1", resource=resource)
    assert resource.requested == "air-monitor-readings"
    return table


def test_number_conversion_both_directions() -> None:
    converted = to_dynamodb({"temperature": 21.5, "co2": 400, "ok": True, "nested": [0.1]})

    assert converted == {
        "temperature": Decimal("21.5"),
        "co2": 400,
        "ok": True,
        "nested": [Decimal("0.1")],
    }
    assert from_dynamodb({"co2": Decimal("400"), "temperature": Decimal("21.5")}) == {
        "co2": 400,
        "temperature": 21.5,
    }
    assert isinstance(from_dynamodb(Decimal("400")), int)


def test_put_item_sends_decimals() -> None:
    stub = StubTable()
    table = _table(stub)

    table.put_item({"deviceId": "dev-1", "timestamp": 5, "temperature": 21.5})

    assert stub.calls == [
        ("put_item", {"Item": {"deviceId": "dev-1", "timestamp": 5, "temperature": Decimal("21.5")}})
    ]


def test_query_builds_descending_limited_request() -> None:
    stub = StubTable(pages=[{"Items": [{"deviceId": "dev-1", "timestamp": Decimal("9"), "co2": Decimal("400")}]}])
    table = _table(stub)

    items = table.query("dev-1", sort_min=5, limit=1000)

    assert items == [{"deviceId": "dev-1", "timestamp": 9, "co2": 400}]
    _, kwargs = stub.calls[0]
    assert kwargs["ScanIndexForward"] is False
    assert kwargs["Limit"] == 1000
    assert "KeyConditionExpression" in kwargs


def test_scan_follows_pagination() -> None:
    stub = StubTable(
        pages=[
            {"Items": [{"deviceId": "dev-1", "timestamp": Decimal("1")}], "LastEvaluatedKey": {"k": 1}},
            {"Items": [{"deviceId": "dev-2", "timestamp": Decimal("2")}]},
        ]
    )
    table = _table(stub)

    items = table.scan(sort_min=0)

    assert [item["deviceId"] for item in items] == ["dev-1", "dev-2"]
    assert "ExclusiveStartKey" not in stub.calls[0][1]
    assert stub.calls[1][1]["ExclusiveStartKey"] == {"k": 1}
    assert "FilterExpression" in stub.calls[0][1]


def test_scan_projection_uses_attribute_name_placeholders() -> None:
    stub = StubTable(pages=[{"Items": [{"deviceId": "dev-1"}], "LastEvaluatedKey": {"k": 1}}])
    table = _table(stub)

    items = table.scan(projection=["deviceId"], limit=1)

    assert items == [{"deviceId": "dev-1"}]
    kwargs = stub.calls[0][1]
    assert kwargs["ProjectionExpression"] == "#p0"
    assert kwargs["ExpressionAttributeNames"] == {"#p0": "deviceId"}
    assert kwargs["Limit"] == 1
    assert len(stub.calls) == 1


def test_backend_errors_are_translated() -> None:
    table = _table(StubTable(fail=True))

    with pytest.raises(StoreWriteError, match="slow down"):
        table.put_item({"deviceId": "dev-1", "timestamp": 1})
    with pytest.raises(StoreReadError, match="ProvisionedThroughputExceeded"):
        table.query("dev-1")
    with pytest.raises(StoreReadError):
        table.scan()


@pytest.mark.parametrize(
    "error",
    [
        decimal.Overflow("exponent out of range"),
        decimal.Inexact("value too precise"),
        TypeError("Infinity and NaN not supported"),
    ],
)
def test_serializer_errors_are_translated(error: Exception) -> None:
    table = _table(StubTable(error=error))

    with pytest.raises(StoreWriteError):
        table.put_item({"deviceId": "dev-1", "timestamp": 1, "co2": 1e200})
    with pytest.raises(StoreReadError):
        table.query("dev-1", sort_min=0)
    with pytest.raises(StoreReadError):
        table.scan(sort_min=0)
