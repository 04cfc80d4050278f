"""Synthetic air-quality readings for demos and local development."""

from __future__ import annotations

import math
import random
from dataclasses import dataclass
from datetime import datetime, tzinfo
from typing import Dict, Iterator, Optional, Sequence

from models.records import Reading

DEFAULT_INTERVAL_MS = 15 * 60 * 1000
MILLIS_PER_DAY = 24 * 60 * 60 * 1000

_MEAL_HOURS = ((7, 9), (12, 14), (18, 20))


@dataclass(frozen=True)
class DeviceProfile:
    """Baseline level and peak-to-peak noise for each generated metric."""

    device_id: str
    baselines: Dict[str, float]
    variations: Dict[str, float]

    @property
    def is_kitchen(self) -> bool:
        return "kitchen" in self.device_id


DEFAULT_PROFILES: Sequence[DeviceProfile] = (
    DeviceProfile(
        device_id="air-monitor-living-room",
        baselines={"temperature": 22.5, "humidity": 45, "co2": 450, "tvoc": 120, "mc2p5": 8},
        variations={"temperature": 3, "humidity": 15, "co2": 200, "tvoc": 80, "mc2p5": 5},
    ),
    DeviceProfile(
        device_id="air-monitor-bedroom",
        baselines={"temperature": 20.0, "humidity": 50, "co2": 380, "tvoc": 90, "mc2p5": 6},
        variations={"temperature": 2.5, "humidity": 12, "co2": 150, "tvoc": 60, "mc2p5": 4},
    ),
    DeviceProfile(
        device_id="air-monitor-kitchen",
        baselines={"temperature": 24.0, "humidity": 55, "co2": 520, "tvoc": 180, "mc2p5": 12},
        variations={"temperature": 4, "humidity": 20, "co2": 300, "tvoc": 120, "mc2p5": 8},
    ),
)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def activity_multiplier(profile: DeviceProfile, moment: datetime) -> float:
    """Scale factor for occupancy-driven metrics (co2, tvoc, mc2p5)."""
    multiplier = 1.0
    if 8 <= moment.hour <= 22:
        multiplier = 1.2
    if profile.is_kitchen and any(start <= moment.hour <= end for start, end in _MEAL_HOURS):
        multiplier = 1.5
    if moment.weekday() >= 5:
        multiplier *= 0.9
    return multiplier


def generate_reading(
    profile: DeviceProfile,
    timestamp: int,
    rng: Optional[random.Random] = None,
    tz: Optional[tzinfo] = None,
) -> Reading:
    """Build one plausible reading for ``profile`` at ``timestamp`` (epoch ms).

    Has no side effects beyond drawing from ``rng``. Daily patterns use the
    local wall-clock hour unless ``tz`` is given.
    """
    rng = rng or random.Random()
    moment = datetime.fromtimestamp(timestamp / 1000, tz)
    multiplier = activity_multiplier(profile, moment)
    base = profile.baselines
    spread = profile.variations

    def noise(metric: str) -> float:
        return (rng.random() - 0.5) * spread[metric]

    metrics = {
        "temperature": round(base["temperature"] + noise("temperature"), 1),
        "humidity": max(20, min(80, round(base["humidity"] + noise("humidity"), 1))),
        "co2": max(300, _round_half_up(base["co2"] * multiplier + noise("co2"))),
        "tvoc": max(10, _round_half_up(base["tvoc"] * multiplier + noise("tvoc"))),
        "mc2p5": max(1, round(base["mc2p5"] * multiplier + noise("mc2p5"), 1)),
    }
    return Reading(device_id=profile.device_id, timestamp=timestamp, metrics=metrics)


def generate_series(
    end_ts: int,
    days: float = 5,
    interval_ms: int = DEFAULT_INTERVAL_MS,
    profiles: Sequence[DeviceProfile] = DEFAULT_PROFILES,
    rng: Optional[random.Random] = None,
    tz: Optional[tzinfo] = None,
) -> Iterator[Reading]:
    """Yield one reading per profile every ``interval_ms`` over the last ``days``."""
    if interval_ms <= 0:
        raise ValueError("interval_ms must be positive.")
    rng = rng or random.Random()
    timestamp = int(end_ts - days * MILLIS_PER_DAY)
    while timestamp <= end_ts:
        for profile in profiles:
            yield generate_reading(profile, timestamp, rng=rng, tz=tz)
        timestamp += interval_ms
