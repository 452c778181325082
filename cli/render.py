from __future__ import annotations

from typing import Any, Dict, Iterable, Optional

import typer

from models.sensors import SENSOR_DEFINITIONS, SensorStatus
from services.classifier import classify, summarize

_STATUS_COLORS = {
    SensorStatus.optimal: typer.colors.GREEN,
    SensorStatus.normal: typer.colors.BLUE,
    SensorStatus.warning: typer.colors.YELLOW,
    SensorStatus.critical: typer.colors.RED,
    SensorStatus.no_data: typer.colors.WHITE,
}


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def system_status(payload: Optional[Dict[str, Any]]) -> str:
    """``offline`` when the fetch failed, ``waiting`` before any data, else ``online``."""
    if payload is None:
        return "offline"
    if payload.get("status") == "waiting" or not payload.get("latest"):
        return "waiting"
    return "online"


def latest_values(
    payload: Optional[Dict[str, Any]],
    known: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Newest value per sensor, merged over ``known`` values from earlier polls."""
    values = dict(known or {})
    if not payload:
        return values
    entries = list(payload.get("recentHistory") or [])
    entries.append(payload.get("latest") or {})
    entries.append(payload.get("lastValues") or {})
    for entry in entries:
        for definition in SENSOR_DEFINITIONS:
            value = entry.get(definition.sensor_id)
            if value is not None:
                values[definition.sensor_id] = value
    return values


def sensor_statuses(values: Optional[Dict[str, Any]]) -> Dict[str, SensorStatus]:
    values = values or {}
    return {
        definition.sensor_id: classify(
            definition.sensor_id, values.get(definition.sensor_id), definition
        )
        for definition in SENSOR_DEFINITIONS
    }


def format_value(value: Any, unit: str) -> str:
    if value is None:
        return "No Data"
    return f"{value}{unit}"


def render_snapshot(
    payload: Optional[Dict[str, Any]],
    known_values: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Render one poll and return the per-sensor values known after it.

    A waiting service has restarted or never received data, so nothing is kept.
    """
    values = latest_values(payload, known_values)
    state = system_status(payload)
    echo_heading("System Status")
    typer.echo(state.upper())

    if state == "offline":
        typer.echo("Sensor service is unreachable.")
        return values

    if state == "waiting":
        typer.echo(payload.get("message") or "No sensor data received yet.")
        expected = payload.get("expectedFormat") or {}
        if expected:
            typer.echo()
            echo_heading("Expected Format")
            echo_key_values(expected.items())
        return {}

    statuses = sensor_statuses(values)
    echo_key_values(
        [
            ("last_updated", payload.get("lastUpdated")),
            ("total_count", payload.get("totalCount")),
        ]
    )

    typer.echo()
    echo_heading("Sensors")
    for definition in SENSOR_DEFINITIONS:
        status = statuses[definition.sensor_id]
        value = format_value(values.get(definition.sensor_id), definition.unit)
        typer.echo(f"  - {definition.name}: {value} ", nl=False)
        typer.secho(f"({status.value})", fg=_STATUS_COLORS[status])

    summary = summarize(statuses.values())
    typer.echo()
    echo_heading("Alerts")
    echo_key_values(
        [
            ("critical", summary.critical),
            ("warning", summary.warning),
            ("no_data", summary.no_data),
        ]
    )
    return values
