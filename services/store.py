"""Store adapter between the services and a reading table backend."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Generic, Iterable, List, Optional, Protocol, TypeVar

from datastore.dynamodb import DynamoDBTable
from datastore.errors import StoreError, StoreReadError, StoreWriteError
from datastore.mock_dynamodb import MockDynamoDBTable
from models.records import DEVICE_ID_FIELD, Reading
from settings import get_settings

logger = logging.getLogger(__name__)

QUERY_LIMIT = 1000

T = TypeVar("T")


class ReadingTable(Protocol):
    name: str

    def put_item(self, item: Dict[str, Any]) -> None: ...

    def query(
        self,
        partition_value: str,
        sort_min: Any = None,
        limit: Optional[int] = None,
        descending: bool = True,
    ) -> List[Dict[str, Any]]: ...

    def scan(
        self,
        sort_min: Any = None,
        projection: Optional[Iterable[str]] = None,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]: ...


@dataclass
class ReadResult(Generic[T]):
    """Outcome of a read: the items, or an empty list plus the backend error."""

    items: List[T] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failed(cls, error: str) -> "ReadResult[T]":
        return cls(items=[], error=error)


class ReadingStore:
    """Reads and writes ``Reading`` records keyed by ``(deviceId, timestamp)``.

    Write failures raise ``StoreWriteError``. Read failures never raise: they
    come back as a ``ReadResult`` with no items and ``error`` set.
    """

    def __init__(self, table: ReadingTable, backend: str = "mock") -> None:
        self.table = table
        self.backend = backend

    @property
    def table_name(self) -> str:
        return self.table.name

    def put_reading(self, reading: Reading) -> None:
        try:
            self.table.put_item(reading.to_item())
        except StoreWriteError:
            raise
        except StoreError as exc:
            raise StoreWriteError(str(exc)) from exc

    def query_by_device(self, device_id: str, since_ts: int) -> ReadResult[Reading]:
        if not device_id:
            raise ValueError("device_id must be a non-empty string.")
        try:
            items = self.table.query(device_id, sort_min=since_ts, limit=QUERY_LIMIT)
        except StoreError as exc:
            return self._read_failed("query", exc, device_id=device_id)
        return ReadResult(items=[Reading.from_item(item) for item in items])

    def scan_since(self, since_ts: int) -> ReadResult[Reading]:
        try:
            items = self.table.scan(sort_min=since_ts)
        except StoreError as exc:
            return self._read_failed("scan", exc)
        return ReadResult(items=[Reading.from_item(item) for item in items])

    def list_device_ids(self) -> ReadResult[str]:
        try:
            items = self.table.scan(projection=[DEVICE_ID_FIELD])
        except StoreError as exc:
            return self._read_failed("device listing", exc)
        device_ids = {item[DEVICE_ID_FIELD] for item in items if DEVICE_ID_FIELD in item}
        return ReadResult(items=sorted(device_ids))

    def ping(self) -> Optional[str]:
        """Run a one-item read; return the backend error message or ``None``."""
        try:
            self.table.scan(projection=[DEVICE_ID_FIELD], limit=1)
        except StoreError as exc:
            logger.warning(
                "Store health probe failed",
                extra={"table": self.table_name, "backend": self.backend, "reason": str(exc)},
            )
            return str(exc)
        return None

    def _read_failed(
        self, operation: str, exc: StoreError, device_id: Optional[str] = None
    ) -> ReadResult[Any]:
        logger.error(
            "Store %s failed",
            operation,
            extra={
                "table": self.table_name,
                "backend": self.backend,
                "device_id": device_id,
                "reason": str(exc),
            },
        )
        return ReadResult.failed(str(exc) or StoreReadError.__name__)


def build_table(backend: str, table_name: str, region: str, path: Optional[str]) -> ReadingTable:
    if backend == "dynamodb":
        return DynamoDBTable(name=table_name, region=region)

    persistence = Path(path) if path else None
    return MockDynamoDBTable(name=table_name, persistence_path=persistence)


@lru_cache
def build_default_store(
    backend: Optional[str] = None,
    path: Optional[str] = None,
) -> ReadingStore:
    """Factory that wires the store with the configured backend."""
    settings = get_settings()
    store_backend = backend or settings.store_backend
    store_path = settings.store_path if path is None else path
    table = build_table(
        backend=store_backend,
        table_name=settings.table_name,
        region=settings.aws_region,
        path=store_path,
    )
    logger.info(
        "Reading store ready",
        extra={"table": table.name, "backend": store_backend},
    )
    return ReadingStore(table=table, backend=store_backend)
