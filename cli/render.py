from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Iterable

import typer

_KEY_FIELDS = ("deviceId", "timestamp")


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def format_millis(value: Any) -> str:
    if not isinstance(value, (int, float)):
        return "N/A"
    return datetime.fromtimestamp(value / 1000).strftime("%Y-%m-%d %H:%M:%S")


def render_ingest(payload: Dict[str, Any]) -> None:
    echo_heading("Reading Stored")
    echo_key_values(
        [
            ("deviceId", payload.get("deviceId")),
            ("timestamp", payload.get("timestamp")),
            ("recorded_at", format_millis(payload.get("timestamp"))),
        ]
    )


def render_readings(payload: Dict[str, Any], limit: int | None = None) -> None:
    readings = payload.get("readings") or []
    echo_heading(f"Readings ({payload.get('count', len(readings))})")
    if not readings:
        typer.echo("No readings found.")
        return

    shown = readings if limit is None else readings[:limit]
    for reading in shown:
        metrics = " ".join(
            f"{key}={value}"
            for key, value in sorted(reading.items())
            if key not in _KEY_FIELDS
        )
        typer.echo(
            f"  - {format_millis(reading.get('timestamp'))} "
            f"{reading.get('deviceId')}: {metrics or '(no metrics)'}"
        )
    if len(shown) < len(readings):
        typer.echo(f"  ... {len(readings) - len(shown)} more")


def render_health(payload: Dict[str, Any]) -> None:
    status = payload.get("status")
    color = typer.colors.GREEN if status == "ok" else typer.colors.YELLOW
    typer.secho(f"Status: {status}", fg=color, bold=True)
    echo_key_values(
        [
            ("table", payload.get("table")),
            ("backend", payload.get("backend")),
            ("store", payload.get("store")),
            ("timestamp", payload.get("timestamp")),
        ]
    )
