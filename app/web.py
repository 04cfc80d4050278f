from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from services.query import HOUR_OPTIONS, QueryService, build_default_query, resolve_hours

logger = logging.getLogger(__name__)

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))

# (field, title, unit) for every chart on the dashboard, in display order.
CHARTS = (
    ("temperature", "Temperature", "°C"),
    ("humidity", "Humidity", "%"),
    ("co2", "CO₂", "ppm"),
    ("tvoc", "TVOC", "ppb"),
    ("eco2", "eCO₂", "ppm"),
    ("mc1p0", "PM1.0", "μg/m³"),
    ("mc2p5", "PM2.5", "μg/m³"),
    ("mc4p0", "PM4.0", "μg/m³"),
    ("mc10p0", "PM10.0", "μg/m³"),
    ("nc0p5", "Particle Count 0.5μm", "#/cm³"),
    ("nc1p0", "Particle Count 1.0μm", "#/cm³"),
    ("nc2p5", "Particle Count 2.5μm", "#/cm³"),
    ("nc4p0", "Particle Count 4.0μm", "#/cm³"),
    ("nc10p0", "Particle Count 10.0μm", "#/cm³"),
    ("typicalParticleSize", "Typical Particle Size", "nm"),
)

HOUR_LABELS = {1: "Last Hour", 6: "Last 6 Hours", 24: "Last 24 Hours", 168: "Last Week"}


def get_query() -> QueryService:
    return build_default_query()


def _format_millis(value: Optional[int]) -> str:
    if value is None:
        return "N/A"
    return datetime.fromtimestamp(value / 1000).strftime("%Y-%m-%d %H:%M:%S")


templates.env.filters["millis"] = _format_millis


router = APIRouter(include_in_schema=False)


@router.get("/", name="dashboard", response_class=HTMLResponse)
async def dashboard(
    request: Request,
    hours: Optional[str] = Query(None),
    device: Optional[str] = Query(None),
    query: QueryService = Depends(get_query),
) -> HTMLResponse:
    view = query.dashboard(resolve_hours(hours), device or None)
    if not view.available:
        logger.warning(
            "Rendering dashboard without store data",
            extra={"hours": view.hours, "device_id": view.device_id, "status": "degraded"},
        )
    return templates.TemplateResponse(
        request,
        "dashboard.html",
        {
            "view": view,
            "charts": CHARTS,
            "hour_options": [(value, HOUR_LABELS[value]) for value in HOUR_OPTIONS],
            "items": [reading.to_item() for reading in view.readings],
        },
    )
