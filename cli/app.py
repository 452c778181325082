from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.export import build_report, csv_filename, history_to_csv, report_filename
from cli.render import render_snapshot, system_status


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Utilities for interacting with the microclimate sensor hub.",
    context_settings={"help_option_names": ["-h", "--help"]},
)
export_app = typer.Typer(help="Export retained sensor history to flat files.")
app.add_typer(export_app, name="export")


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        typer.secho("CLI state is uninitialized.", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    return state


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _parse_value(raw: str) -> Any:
    candidate = raw.strip()
    if candidate.lower() in {"null", "none", ""}:
        return None
    try:
        return int(candidate)
    except ValueError:
        pass
    try:
        return float(candidate)
    except ValueError:
        return candidate


def _parse_assignments(assignments: List[str]) -> Dict[str, Any]:
    payload: Dict[str, Any] = {}
    for assignment in assignments:
        key, separator, raw_value = assignment.partition("=")
        if not separator or not key.strip():
            raise typer.BadParameter(
                f"Expected KEY=VALUE, got {assignment!r}.", param_hint="READINGS"
            )
        payload[key.strip()] = _parse_value(raw_value)
    return payload


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Sensor hub base URL (defaults to API_BASE_URL env or http://localhost:8000).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds before an HTTP request is abandoned.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, request_timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("submit")
def submit_command(
    ctx: typer.Context,
    readings: List[str] = typer.Argument(
        ..., help="Sensor values as KEY=VALUE, e.g. soil-moisture=60 temperature=22.5."
    ),
) -> None:
    """Push a single reading to the ingestion endpoint."""
    state = _get_state(ctx)
    payload = _parse_assignments(readings)
    ack = state.client.submit_reading(payload)
    typer.secho(
        f"Reading accepted at {ack.get('timestamp')}.", fg=typer.colors.GREEN
    )


@app.command("status")
def status_command(ctx: typer.Context) -> None:
    """Fetch the latest snapshot and show classified sensor status."""
    state = _get_state(ctx)
    render_snapshot(state.client.try_get_snapshot())


@app.command("watch")
def watch_command(
    ctx: typer.Context,
    interval: Optional[float] = typer.Option(
        None,
        "--interval",
        help="Seconds between polls (defaults to CLI_POLL_INTERVAL env or 60).",
    ),
    iterations: int = typer.Option(
        0,
        "--iterations",
        "-n",
        min=0,
        help="Stop after this many polls; 0 polls until interrupted.",
    ),
) -> None:
    """Poll the snapshot on a fixed interval and re-render it."""
    state = _get_state(ctx)
    poll_interval = interval if interval is not None else state.config.poll_interval
    completed = 0
    known_values: Dict[str, Any] = {}
    while True:
        known_values = render_snapshot(state.client.try_get_snapshot(), known_values)
        completed += 1
        if iterations and completed >= iterations:
            return
        typer.echo()
        time.sleep(poll_interval)


def _fetch_history(state: CLIState) -> Optional[Tuple[Dict[str, Any], List[Dict[str, Any]]]]:
    payload = state.client.get_snapshot()
    history: List[Dict[str, Any]] = []
    if system_status(payload) == "online":
        history = state.client.get_history().get("history") or []
    if not history:
        typer.secho(
            "No data available for export. Connect your sensors to start collecting data.",
            fg=typer.colors.YELLOW,
        )
        return None
    return payload, history


@export_app.command("csv")
def export_csv_command(
    ctx: typer.Context,
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", dir_okay=False, help="Destination file."
    ),
) -> None:
    """Write every retained reading as CSV."""
    state = _get_state(ctx)
    fetched = _fetch_history(state)
    if fetched is None:
        return
    _, history = fetched
    destination = output or Path(csv_filename(_now()))
    destination.write_text(history_to_csv(history), encoding="utf-8")
    typer.secho(f"Exported CSV to {destination}", fg=typer.colors.GREEN)


@export_app.command("report")
def export_report_command(
    ctx: typer.Context,
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", dir_okay=False, help="Destination file."
    ),
) -> None:
    """Write a plain-text status report."""
    state = _get_state(ctx)
    fetched = _fetch_history(state)
    if fetched is None:
        return
    payload, history = fetched
    generated_at = _now()
    destination = output or Path(report_filename(generated_at))
    destination.write_text(build_report(payload, generated_at, history), encoding="utf-8")
    typer.secho(f"Exported report to {destination}", fg=typer.colors.GREEN)
