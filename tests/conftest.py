from __future__ import annotations

from typing import Any, Callable

import pytest

from datastore.errors import StoreError, StoreReadError
from services.store import ReadingStore


class FailingTable:
    """Table whose every call fails the way an unreachable backend would."""

    name = "broken"

    def __init__(self, write_error: type[StoreError] = StoreReadError) -> None:
        self.write_error = write_error

    def put_item(self, item: Any) -> None:
        raise self.write_error("throttled")

    def query(self, *args: Any, **kwargs: Any) -> list:
        raise StoreReadError("network unreachable")

    def scan(self, *args: Any, **kwargs: Any) -> list:
        raise StoreReadError("network unreachable")


@pytest.fixture()
def failing_store() -> Callable[..., ReadingStore]:
    def build(**kwargs: Any) -> ReadingStore:
        return ReadingStore(table=FailingTable(**kwargs), backend="dynamodb")

    return build
