"""Domain models shared across services."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping

DEVICE_ID_FIELD = "deviceId"
TIMESTAMP_FIELD = "timestamp"


def current_millis() -> int:
    """Wall-clock time in epoch milliseconds."""
    return time.time_ns() // 1_000_000


@dataclass(frozen=True, slots=True)
class Reading:
    """A single timestamped sensor sample from one device.

    ``metrics`` is open-ended: any channel the device reported is kept
    verbatim, and a missing channel means the sensor sent no data for it.
    """

    device_id: str
    timestamp: int
    metrics: Dict[str, Any] = field(default_factory=dict)

    def to_item(self) -> Dict[str, Any]:
        """Flatten into the stored item layout keyed by ``deviceId``/``timestamp``."""
        item: Dict[str, Any] = dict(self.metrics)
        item[DEVICE_ID_FIELD] = self.device_id
        item[TIMESTAMP_FIELD] = self.timestamp
        return item

    @classmethod
    def from_item(cls, item: Mapping[str, Any]) -> "Reading":
        metrics = {
            key: value
            for key, value in item.items()
            if key not in (DEVICE_ID_FIELD, TIMESTAMP_FIELD)
        }
        return cls(
            device_id=str(item[DEVICE_ID_FIELD]),
            timestamp=int(item[TIMESTAMP_FIELD]),
            metrics=metrics,
        )
