"""Validation and persistence of readings pushed by devices."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Callable, Mapping, Union

from datastore.errors import StoreWriteError
from models.records import DEVICE_ID_FIELD, TIMESTAMP_FIELD, Reading, current_millis
from services.errors import EmptyPayload, MalformedInput
from services.store import ReadingStore, build_default_store
from settings import get_settings

logger = logging.getLogger(__name__)

Body = Union[bytes, str, Mapping[str, Any]]


def _reject_constant(token: str) -> Any:
    raise ValueError(f"{token} is not valid JSON.")


@dataclass(frozen=True)
class IngestResult:
    device_id: str
    timestamp: int


class IngestionService:
    """Turns a raw JSON body into a stored ``Reading``.

    The service owns timestamp assignment: any ``timestamp`` key sent by the
    device is replaced by the server's wall-clock time in epoch milliseconds.
    Writes are not retried; two writes for the same device within the same
    millisecond overwrite each other.
    """

    def __init__(
        self,
        store: ReadingStore,
        default_device_id: str,
        clock: Callable[[], int] = current_millis,
    ) -> None:
        self.store = store
        self.default_device_id = default_device_id
        self.clock = clock

    def ingest(self, body: Body) -> IngestResult:
        payload = self._decode(body)

        if not any(key != DEVICE_ID_FIELD for key in payload):
            raise EmptyPayload("No sensor data provided.")

        device_id = payload.get(DEVICE_ID_FIELD) or self.default_device_id
        metrics = {
            key: value
            for key, value in payload.items()
            if key not in (DEVICE_ID_FIELD, TIMESTAMP_FIELD)
        }
        reading = Reading(device_id=str(device_id), timestamp=self.clock(), metrics=metrics)
        try:
            self.store.put_reading(reading)
        except StoreWriteError:
            logger.exception(
                "Failed to store reading",
                extra={"device_id": reading.device_id, "timestamp": reading.timestamp},
            )
            raise

        logger.info(
            "Stored reading",
            extra={
                "device_id": reading.device_id,
                "timestamp": reading.timestamp,
                "count": len(metrics),
            },
        )
        return IngestResult(device_id=reading.device_id, timestamp=reading.timestamp)

    @staticmethod
    def _decode(body: Body) -> Mapping[str, Any]:
        if isinstance(body, Mapping):
            return body
        try:
            payload = json.loads(body, parse_constant=_reject_constant)
        except (TypeError, ValueError) as exc:
            raise MalformedInput("Request body is not valid JSON.") from exc
        if not isinstance(payload, dict):
            raise MalformedInput("Request body must be a JSON object.")
        return payload


@lru_cache
def build_default_ingestion() -> IngestionService:
    settings = get_settings()
    return IngestionService(
        store=build_default_store(),
        default_device_id=settings.default_device_id,
    )
