"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field


class HealthStatus(str, Enum):
    """Overall service state reported by the health probe."""

    ok = "ok"
    degraded = "degraded"


class IngestResponse(BaseModel):
    """Acknowledgement returned to a device after its reading is stored."""

    model_config = ConfigDict(populate_by_name=True)

    message: str = "Data ingested successfully!"
    device_id: str = Field(..., alias="deviceId")
    timestamp: int = Field(..., description="Server-assigned epoch milliseconds.")


class MessageResponse(BaseModel):
    message: str


class StoreFailureResponse(BaseModel):
    message: str
    error: str


class ReadingsResponse(BaseModel):
    """Raw readings for the requested window, newest first."""

    readings: List[Dict[str, Any]] = Field(default_factory=list)
    count: int = Field(..., ge=0)


class ReadFailureResponse(BaseModel):
    error: str


class HealthResponse(BaseModel):
    status: HealthStatus
    timestamp: datetime
    message: str
    table: str
    backend: str
    store: str = Field(..., description="'connected' or 'error: <backend message>'.")
