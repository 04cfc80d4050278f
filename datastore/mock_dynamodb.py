from __future__ import annotations
import copy
import json
from pathlib import Path
from threading import Lock
from typing import Any, Dict, Iterable, List, Optional, Tuple

from datastore.errors import StoreReadError, StoreWriteError

Item = Dict[str, Any]
ItemKey = Tuple[str, Any]


class MockDynamoDBTable:
    """In-process stand-in for a DynamoDB table with a composite primary key.

    Items are keyed by ``(partition_key, sort_key)``; writing an existing key
    replaces the item. When ``persistence_path`` is set every write is flushed
    to a JSON file and reloaded on construction.
    """

    def __init__(
        self,
        name: str,
        persistence_path: Optional[Path] = None,
        partition_key: str = "deviceId",
        sort_key: str = "timestamp",
    ) -> None:
        self.name = name
        self.partition_key = partition_key
        self.sort_key = sort_key
        self._items: Dict[ItemKey, Item] = {}
        self.persistence_path = persistence_path
        self._lock = Lock()
        if persistence_path:
            persistence_path.parent.mkdir(parents=True, exist_ok=True)
            self._load_from_disk()

    def put_item(self, item: Item) -> None:
        key = self._key_of(item)
        with self._lock:
            previous = self._items.get(key)
            self._items[key] = copy.deepcopy(item)
            try:
                self._persist()
            except OSError as exc:
                if previous is None:
                    del self._items[key]
                else:
                    self._items[key] = previous
                raise StoreWriteError(f"Failed to persist table {self.name!r}: {exc}") from exc

    def query(
        self,
        partition_value: str,
        sort_min: Any = None,
        limit: Optional[int] = None,
        descending: bool = True,
    ) -> List[Item]:
        """Return items of one partition with ``sort_key >= sort_min``."""

        with self._lock:
            matches = [
                item
                for (partition, sort_value), item in self._items.items()
                if partition == partition_value
                and (sort_min is None or sort_value >= sort_min)
            ]
        matches.sort(key=lambda item: item[self.sort_key], reverse=descending)
        if limit is not None:
            matches = matches[:limit]
        return [copy.deepcopy(item) for item in matches]

    def scan(
        self,
        sort_min: Any = None,
        projection: Optional[Iterable[str]] = None,
        limit: Optional[int] = None,
    ) -> List[Item]:
        """Return copies of stored items with ``sort_key >= sort_min``, optionally projected."""

        fields = tuple(projection) if projection is not None else None
        results: List[Item] = []
        with self._lock:
            for item in self._items.values():
                if limit is not None and len(results) >= limit:
                    break
                if sort_min is not None and item[self.sort_key] < sort_min:
                    continue
                if fields is not None:
                    results.append({name: item[name] for name in fields if name in item})
                else:
                    results.append(copy.deepcopy(item))
        return results

    def _key_of(self, item: Item) -> ItemKey:
        try:
            return item[self.partition_key], item[self.sort_key]
        except KeyError as exc:
            raise StoreWriteError(
                f"Item is missing key attribute {exc.args[0]!r} for table {self.name!r}."
            ) from exc

    def _persist(self) -> None:
        if not self.persistence_path:
            return
        payload = sorted(
            self._items.values(),
            key=lambda item: (item[self.partition_key], item[self.sort_key]),
        )
        self.persistence_path.write_text(json.dumps(payload, indent=2, sort_keys=True))

    def _load_from_disk(self) -> None:
        if not self.persistence_path or not self.persistence_path.exists():
            return

        try:
            raw = self.persistence_path.read_text() or "[]"
            data = json.loads(raw)
        except json.JSONDecodeError:
            data = []
        except OSError as exc:
            raise StoreReadError(
                f"Failed to load table {self.name!r} from {self.persistence_path}: {exc}"
            ) from exc

        if not isinstance(data, list):
            data = []
        for item in data:
            if isinstance(item, dict):
                self._items[self._key_of(item)] = item
