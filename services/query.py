"""Time-window queries over stored readings."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Callable, List, Optional

from models.records import Reading, current_millis
from services.store import ReadResult, ReadingStore, build_default_store

logger = logging.getLogger(__name__)

DEFAULT_HOURS = 24
MILLIS_PER_HOUR = 3_600_000
HOUR_OPTIONS = (1, 6, 24, 168)


def resolve_hours(raw: Any, default: float = DEFAULT_HOURS) -> float:
    """Parse a ``hours`` request parameter, falling back to ``default``.

    Missing, unparsable, and non-positive values all fall back.
    """
    if raw is None:
        return default
    try:
        hours = float(raw)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(hours) or hours <= 0:
        return default
    return int(hours) if hours.is_integer() else hours


def sort_newest_first(readings: List[Reading]) -> List[Reading]:
    return sorted(readings, key=lambda reading: reading.timestamp, reverse=True)


@dataclass
class DashboardView:
    """Readings for the selected window alongside every known device."""

    hours: float
    device_id: Optional[str]
    readings: List[Reading] = field(default_factory=list)
    device_ids: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def reading_count(self) -> int:
        return len(self.readings)

    @property
    def device_count(self) -> int:
        return len(self.device_ids)

    @property
    def latest_timestamp(self) -> Optional[int]:
        return self.readings[0].timestamp if self.readings else None

    @property
    def available(self) -> bool:
        return not self.errors


class QueryService:
    def __init__(
        self,
        store: ReadingStore,
        clock: Callable[[], int] = current_millis,
    ) -> None:
        self.store = store
        self.clock = clock

    def window_start(self, hours: float) -> int:
        # Stored timestamps are non-negative epoch milliseconds.
        return max(0, int(self.clock() - hours * MILLIS_PER_HOUR))

    def recent_readings(
        self,
        hours: float = DEFAULT_HOURS,
        device_id: Optional[str] = None,
    ) -> ReadResult[Reading]:
        """Readings newer than ``hours`` ago, most recent first.

        With ``device_id`` this is a keyed range query capped at 1000 items;
        without it the whole table is scanned and sorted here.
        """
        since_ts = self.window_start(hours)
        if device_id:
            return self.store.query_by_device(device_id, since_ts)

        result = self.store.scan_since(since_ts)
        if not result.ok:
            return result
        return ReadResult(items=sort_newest_first(result.items))

    def device_ids(self) -> ReadResult[str]:
        return self.store.list_device_ids()

    def dashboard(
        self,
        hours: float = DEFAULT_HOURS,
        device_id: Optional[str] = None,
    ) -> DashboardView:
        readings = self.recent_readings(hours, device_id)
        devices = self.device_ids()
        errors = [result.error for result in (readings, devices) if result.error]
        view = DashboardView(
            hours=hours,
            device_id=device_id,
            readings=readings.items,
            device_ids=devices.items,
            errors=errors,
        )
        logger.debug(
            "Built dashboard view",
            extra={
                "hours": hours,
                "device_id": device_id,
                "count": view.reading_count,
                "status": "ok" if view.available else "degraded",
            },
        )
        return view


@lru_cache
def build_default_query() -> QueryService:
    return QueryService(store=build_default_store())
