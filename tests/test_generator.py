"""Unit tests for the synthetic reading generator."""

from __future__ import annotations

import random
from datetime import datetime, timezone

import pytest

from services.generator import (
    DEFAULT_PROFILES,
    DeviceProfile,
    activity_multiplier,
    generate_reading,
    generate_series,
)

KITCHEN = next(profile for profile in DEFAULT_PROFILES if profile.is_kitchen)
BEDROOM = next(profile for profile in DEFAULT_PROFILES if "bedroom" in profile.device_id)


def _millis(*args: int) -> int:
    return int(datetime(*args, tzinfo=timezone.utc).timestamp() * 1000)


@pytest.mark.parametrize(
    ("profile", "moment", "expected"),
    [
        (BEDROOM, datetime(2024, 1, 3, 3, 0), 1.0),  # Wednesday night
        (BEDROOM, datetime(2024, 1, 3, 15, 0), 1.2),
        (KITCHEN, datetime(2024, 1, 3, 12, 30), 1.5),
        (KITCHEN, datetime(2024, 1, 3, 7, 0), 1.5),
        (KITCHEN, datetime(2024, 1, 6, 19, 0), 1.5 * 0.9),  # Saturday dinner
        (BEDROOM, datetime(2024, 1, 7, 2, 0), 0.9),  # Sunday night
    ],
)
def test_activity_multiplier(profile: DeviceProfile, moment: datetime, expected: float) -> None:
    assert activity_multiplier(profile, moment) == pytest.approx(expected)


def test_generate_reading_is_deterministic_for_a_seed() -> None:
    timestamp = _millis(2024, 1, 3, 12, 0)

    first = generate_reading(KITCHEN, timestamp, rng=random.Random(7), tz=timezone.utc)
    second = generate_reading(KITCHEN, timestamp, rng=random.Random(7), tz=timezone.utc)

    assert first == second
    assert first.device_id == KITCHEN.device_id
    assert first.timestamp == timestamp
    assert set(first.metrics) == {"temperature", "humidity", "co2", "tvoc", "mc2p5"}


def test_generated_values_respect_clamps() -> None:
    rng = random.Random(1)
    profile = DeviceProfile(
        device_id="extreme",
        baselines={"temperature": 0.0, "humidity": 95, "co2": 0, "tvoc": 0, "mc2p5": 0},
        variations={"temperature": 1, "humidity": 1, "co2": 1, "tvoc": 1, "mc2p5": 1},
    )

    for hour in range(24):
        reading = generate_reading(profile, _millis(2024, 1, 3, hour), rng=rng, tz=timezone.utc)
        assert reading.metrics["humidity"] == 80
        assert reading.metrics["co2"] == 300
        assert reading.metrics["tvoc"] == 10
        assert reading.metrics["mc2p5"] == 1
        assert isinstance(reading.metrics["co2"], int)


def test_generate_series_covers_every_profile_each_interval() -> None:
    end = _millis(2024, 1, 3, 12, 0)
    interval = 15 * 60 * 1000

    readings = list(generate_series(end, days=1, interval_ms=interval, rng=random.Random(3)))

    steps = 24 * 4 + 1
    assert len(readings) == steps * len(DEFAULT_PROFILES)
    assert readings[0].timestamp == end - 24 * 60 * 60 * 1000
    assert readings[-1].timestamp == end
    assert {reading.device_id for reading in readings} == {
        profile.device_id for profile in DEFAULT_PROFILES
    }


def test_generate_series_rejects_non_positive_interval() -> None:
    with pytest.raises(ValueError):
        list(generate_series(0, interval_ms=0))
