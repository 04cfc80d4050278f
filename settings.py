from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional


_TABLE_NAME_ENV = "DYNAMODB_TABLE_NAME"
_REGION_ENV = "AWS_REGION"
_BACKEND_ENV = "READINGS_STORE_BACKEND"
_STORE_PATH_ENV = "READINGS_STORE_PATH"
_DEFAULT_DEVICE_ENV = "DEFAULT_DEVICE_ID"
_PORT_ENV = "PORT"
_LOG_LEVEL_ENV = "LOG_LEVEL"

SUPPORTED_BACKENDS = ("mock", "dynamodb")


@dataclass(frozen=True)
class Settings:
    table_name: str
    aws_region: str
    store_backend: str
    store_path: Optional[str]
    default_device_id: str
    port: int
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_optional_env(name: str, default: Optional[str]) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or None


def _read_port(default: int) -> int:
    value = os.getenv(_PORT_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if 0 < parsed < 65536 else default


def _read_backend(default: str) -> str:
    candidate = _read_str_env(_BACKEND_ENV, default).lower()
    return candidate if candidate in SUPPORTED_BACKENDS else default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        table_name=_read_str_env(_TABLE_NAME_ENV, "air-monitor-readings"),
        aws_region=_read_str_env(_REGION_ENV, "us-east-1"),
        store_backend=_read_backend("mock"),
        store_path=_read_optional_env(_STORE_PATH_ENV, "./tmp/readings.json"),
        default_device_id=_read_str_env(_DEFAULT_DEVICE_ENV, "air-monitor-01"),
        port=_read_port(3000),
        log_level=_read_log_level("INFO"),
    )
