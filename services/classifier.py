"""Status classification for sensor values."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Mapping, Optional

from models.records import Number
from models.sensors import SENSOR_DEFINITIONS, SensorDefinition, SensorStatus, get_definition

SOIL_MOISTURE = "soil-moisture"


@dataclass(frozen=True)
class AlertSummary:
    critical: int = 0
    warning: int = 0
    no_data: int = 0


def _classify_soil_moisture(value: Number) -> SensorStatus:
    if 50 <= value <= 75:
        return SensorStatus.optimal
    if value < 30 or value > 85:
        return SensorStatus.critical
    if value < 40 or value > 80:
        return SensorStatus.warning
    return SensorStatus.normal


def classify(
    sensor_id: str,
    value: Optional[Number],
    definition: Optional[SensorDefinition] = None,
) -> SensorStatus:
    """Derive the status of ``value`` for ``sensor_id``.

    Soil moisture follows its own agronomic bands. Every other sensor is
    ``critical`` beyond 80% of its minimum or 120% of its maximum, ``warning``
    outside its threshold, and ``normal`` otherwise.
    """
    if value is None:
        return SensorStatus.no_data
    if sensor_id == SOIL_MOISTURE:
        return _classify_soil_moisture(value)

    threshold = (definition or get_definition(sensor_id)).threshold
    if value < threshold.min * 0.8 or value > threshold.max * 1.2:
        return SensorStatus.critical
    if value < threshold.min or value > threshold.max:
        return SensorStatus.warning
    return SensorStatus.normal


def classify_values(values: Mapping[str, Optional[Number]]) -> Dict[str, SensorStatus]:
    """Classify every recognized sensor against its newest known value."""
    statuses: Dict[str, SensorStatus] = {}
    for definition in SENSOR_DEFINITIONS:
        value = values.get(definition.sensor_id)
        statuses[definition.sensor_id] = classify(definition.sensor_id, value, definition)
    return statuses


def summarize(statuses: Iterable[SensorStatus]) -> AlertSummary:
    critical = warning = no_data = 0
    for status in statuses:
        if status == SensorStatus.critical:
            critical += 1
        elif status == SensorStatus.warning:
            warning += 1
        elif status == SensorStatus.no_data:
            no_data += 1
    return AlertSummary(critical=critical, warning=warning, no_data=no_data)
