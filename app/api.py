"""HTTP route definitions for the service."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import JSONResponse

from app.schemas import (
    HealthResponse,
    HealthStatus,
    IngestResponse,
    MessageResponse,
    ReadFailureResponse,
    ReadingsResponse,
    StoreFailureResponse,
)
from datastore.errors import StoreWriteError
from services.errors import IngestionError
from services.ingestion import IngestionService, build_default_ingestion
from services.query import QueryService, build_default_query, resolve_hours
from services.store import ReadingStore, build_default_store

logger = logging.getLogger(__name__)

router = APIRouter()


def get_ingestion() -> IngestionService:
    return build_default_ingestion()


def get_query() -> QueryService:
    return build_default_query()


def get_store() -> ReadingStore:
    return build_default_store()


@router.post(
    "/readings",
    response_model=IngestResponse,
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": MessageResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": StoreFailureResponse},
    },
    summary="Ingest one reading pushed by a device.",
)
async def ingest_reading(
    request: Request,
    ingestion: IngestionService = Depends(get_ingestion),
) -> IngestResponse | JSONResponse:
    body = await request.body()
    try:
        result = ingestion.ingest(body)
    except IngestionError as exc:
        logger.warning("Rejected reading", extra={"reason": str(exc)})
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=MessageResponse(message=str(exc)).model_dump(),
        )
    except StoreWriteError as exc:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=StoreFailureResponse(
                message="Error ingesting data.", error=str(exc)
            ).model_dump(),
        )
    return IngestResponse(device_id=result.device_id, timestamp=result.timestamp)


@router.get(
    "/api/readings",
    response_model=ReadingsResponse,
    responses={status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ReadFailureResponse}},
    summary="Raw readings for a time window, optionally for one device.",
)
async def list_readings(
    hours: Optional[str] = Query(None, description="Window size in hours (default 24)."),
    device: Optional[str] = Query(None, description="Restrict to one device id."),
    query: QueryService = Depends(get_query),
) -> ReadingsResponse | JSONResponse:
    result = query.recent_readings(resolve_hours(hours), device or None)
    if not result.ok:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ReadFailureResponse(error="Failed to fetch readings").model_dump(),
        )
    items = [reading.to_item() for reading in result.items]
    return ReadingsResponse(readings=items, count=len(items))


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Liveness probe with a minimal store read.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck(store: ReadingStore = Depends(get_store)) -> HealthResponse:
    error = store.ping()
    health = HealthResponse(
        status=HealthStatus.ok if error is None else HealthStatus.degraded,
        timestamp=datetime.now(timezone.utc),
        message="Air Monitor Dashboard is healthy!",
        table=store.table_name,
        backend=store.backend,
        store="connected" if error is None else f"error: {error}",
    )
    logger.info("Health check", extra={"status": health.status.value})
    return health
