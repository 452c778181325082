"""Flat-file exports of the history returned by the query endpoints."""

from __future__ import annotations

import csv
import io
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence

from cli.render import format_value, latest_values, sensor_statuses, system_status
from models.sensors import SENSOR_DEFINITIONS, get_definition
from services.classifier import summarize

_CSV_COLUMNS = (
    ("temperature", "Temperature (°C)"),
    ("humidity", "Humidity (%)"),
    ("soil-moisture", "Soil Moisture (%)"),
    ("light-intensity", "Light Intensity (lux)"),
    ("wind-speed", "Wind Speed (km/h)"),
    ("rainfall", "Rainfall (mm/h)"),
)

_REPORT_FIELDS = (
    ("temperature", "Temp"),
    ("humidity", "Humidity"),
    ("soil-moisture", "Soil"),
    ("light-intensity", "Light"),
    ("wind-speed", "Wind"),
    ("rainfall", "Rain"),
)

REPORT_RECENT_ROWS = 10


def csv_filename(today: datetime) -> str:
    return f"iot-microclimate-data-{today.date().isoformat()}.csv"


def report_filename(today: datetime) -> str:
    return f"iot-microclimate-report-{today.date().isoformat()}.txt"


def history_to_csv(history: Iterable[Dict[str, Any]]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(["Timestamp", *(header for _, header in _CSV_COLUMNS)])
    for entry in history:
        row: List[Any] = [entry.get("timestamp", "")]
        for sensor_id, _ in _CSV_COLUMNS:
            value = entry.get(sensor_id)
            row.append("" if value is None else value)
        writer.writerow(row)
    return buffer.getvalue()


def _format_history_line(entry: Dict[str, Any]) -> str:
    parts = []
    for sensor_id, label in _REPORT_FIELDS:
        value = entry.get(sensor_id)
        unit = get_definition(sensor_id).unit
        parts.append(f"{label}: {'N/A' if value is None else value}{unit}")
    return f"{entry.get('timestamp', 'unknown')} - {', '.join(parts)}"


def build_report(
    payload: Optional[Dict[str, Any]],
    generated_at: datetime,
    history: Optional[Sequence[Dict[str, Any]]] = None,
) -> str:
    """Render the plain-text system report for a snapshot payload.

    ``history`` defaults to the snapshot's recent window.
    """
    state = system_status(payload)
    payload = payload or {}
    values = latest_values(payload)
    if history is None:
        history = payload.get("recentHistory") or []
    statuses = sensor_statuses(values)
    summary = summarize(statuses.values())

    lines = [
        "IoT Microclimate System Report",
        f"Generated: {generated_at.isoformat(timespec='seconds')}",
        "",
        "CURRENT SENSOR STATUS:",
    ]
    for definition in SENSOR_DEFINITIONS:
        value = format_value(values.get(definition.sensor_id), definition.unit)
        status = statuses[definition.sensor_id].value.upper()
        lines.append(f"{definition.name}: {value} ({status})")

    lines.extend(
        [
            "",
            "SYSTEM ALERTS:",
            f"Critical Alerts: {summary.critical}",
            f"Warning Alerts: {summary.warning}",
            f"Sensors with No Data: {summary.no_data}",
            f"System Status: {state.upper()}",
            "",
            f"RECENT DATA (Last {len(history)} readings):",
        ]
    )
    lines.extend(_format_history_line(entry) for entry in history[-REPORT_RECENT_ROWS:])

    lines.extend(["", "SENSOR THRESHOLDS:"])
    for definition in SENSOR_DEFINITIONS:
        threshold = definition.threshold
        lines.append(f"{definition.name}: {threshold.min}-{threshold.max}{definition.unit}")

    return "\n".join(lines) + "\n"
