from __future__ import annotations

import json
import logging
import random
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import render_health, render_ingest, render_readings
from datastore.errors import StoreWriteError
from logging_config import configure_logging
from models.records import current_millis
from services.generator import generate_series
from services.store import build_default_store

logger = logging.getLogger(__name__)

SEED_PROGRESS_EVERY = 100


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Utilities for interacting with the air monitor service.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1, message="CLI state is uninitialized.")
    return state


def parse_metrics(pairs: List[str]) -> Dict[str, Any]:
    """Parse ``name=value`` arguments; values are JSON when they parse as JSON."""
    metrics: Dict[str, Any] = {}
    for pair in pairs:
        name, sep, raw = pair.partition("=")
        name = name.strip()
        if not sep or not name:
            raise typer.BadParameter(f"Expected NAME=VALUE, got {pair!r}.")
        try:
            metrics[name] = json.loads(raw)
        except ValueError:
            metrics[name] = raw
    return metrics


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Service base URL (defaults to API_BASE_URL env or http://localhost:3000).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="HTTP timeout in seconds.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("send")
def send_command(
    ctx: typer.Context,
    metrics: List[str] = typer.Argument(..., help="Metric values as NAME=VALUE, e.g. co2=415."),
    device: Optional[str] = typer.Option(
        None,
        "--device",
        "-d",
        help="Device id; the service default is used when omitted.",
    ),
) -> None:
    """Send one reading to the ingestion endpoint."""
    state = _get_state(ctx)
    payload = parse_metrics(metrics)
    if device:
        payload["deviceId"] = device
    response = state.client.send_reading(payload)
    render_ingest(response)


@app.command("readings")
def readings_command(
    ctx: typer.Context,
    hours: Optional[float] = typer.Option(None, "--hours", help="Window size in hours."),
    device: Optional[str] = typer.Option(None, "--device", "-d", help="Restrict to one device."),
    limit: Optional[int] = typer.Option(20, "--limit", help="Maximum rows to print."),
) -> None:
    """List recent readings, newest first."""
    state = _get_state(ctx)
    payload = state.client.get_readings(hours=hours, device=device)
    render_readings(payload, limit=limit)


@app.command("health")
def health_command(ctx: typer.Context) -> None:
    """Show service and store health."""
    state = _get_state(ctx)
    payload = state.client.get_health()
    render_health(payload)
    if payload.get("status") != "ok":
        raise typer.Exit(code=1)


@app.command("seed")
def seed_command(
    days: float = typer.Option(5.0, "--days", help="How many days of history to generate."),
    interval_minutes: int = typer.Option(15, "--interval-minutes", help="Minutes between samples."),
    seed: Optional[int] = typer.Option(None, "--seed", help="Random seed for repeatable data."),
) -> None:
    """Write synthetic readings for the demo devices straight into the store."""
    configure_logging()
    store = build_default_store()
    rng = random.Random(seed)
    inserted = 0
    failed = 0
    typer.echo(f"Generating {days} days of readings into {store.table_name!r} ...")
    for reading in generate_series(
        end_ts=current_millis(),
        days=days,
        interval_ms=interval_minutes * 60 * 1000,
        rng=rng,
    ):
        try:
            store.put_reading(reading)
        except StoreWriteError as exc:
            failed += 1
            logger.error(
                "Failed to insert synthetic reading",
                extra={"device_id": reading.device_id, "timestamp": reading.timestamp, "reason": str(exc)},
            )
            continue
        inserted += 1
        if inserted % SEED_PROGRESS_EVERY == 0:
            logger.info("Inserted synthetic readings", extra={"count": inserted})

    typer.secho(f"Inserted {inserted} readings.", fg=typer.colors.GREEN)
    if failed:
        typer.secho(f"{failed} readings failed to insert.", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
