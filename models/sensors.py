"""Static sensor definitions and the status vocabulary derived from them."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple


class SensorStatus(str, Enum):
    """Derived status of a single sensor value."""

    optimal = "optimal"
    normal = "normal"
    warning = "warning"
    critical = "critical"
    no_data = "no-data"


@dataclass(frozen=True, slots=True)
class Threshold:
    """Acceptable ``[min, max]`` range for a sensor."""

    min: float
    max: float


@dataclass(frozen=True, slots=True)
class SensorDefinition:
    sensor_id: str
    name: str
    unit: str
    threshold: Threshold
    expected_format: str


SENSOR_DEFINITIONS: Tuple[SensorDefinition, ...] = (
    SensorDefinition(
        sensor_id="soil-moisture",
        name="Soil Moisture",
        unit="%",
        threshold=Threshold(min=40, max=80),
        expected_format="number (0-100)",
    ),
    SensorDefinition(
        sensor_id="temperature",
        name="Temperature (DHT22)",
        unit="°C",
        threshold=Threshold(min=15, max=35),
        expected_format="number (celsius)",
    ),
    SensorDefinition(
        sensor_id="humidity",
        name="Humidity (DHT22)",
        unit="%",
        threshold=Threshold(min=30, max=70),
        expected_format="number (0-100)",
    ),
    SensorDefinition(
        sensor_id="light-intensity",
        name="Light Intensity (LDR)",
        unit="lux",
        threshold=Threshold(min=200, max=1000),
        expected_format="number (lux)",
    ),
    SensorDefinition(
        sensor_id="wind-speed",
        name="Wind Speed",
        unit="km/h",
        threshold=Threshold(min=0, max=50),
        expected_format="number (km/h)",
    ),
    SensorDefinition(
        sensor_id="rainfall",
        name="Rainfall Intensity",
        unit="mm/h",
        threshold=Threshold(min=0, max=10),
        expected_format="number (mm/h)",
    ),
)

SENSOR_IDS: Tuple[str, ...] = tuple(definition.sensor_id for definition in SENSOR_DEFINITIONS)

_DEFINITIONS_BY_ID: Dict[str, SensorDefinition] = {
    definition.sensor_id: definition for definition in SENSOR_DEFINITIONS
}


def get_definition(sensor_id: str) -> SensorDefinition:
    try:
        return _DEFINITIONS_BY_ID[sensor_id]
    except KeyError as exc:
        raise KeyError(f"Unknown sensor id {sensor_id!r}.") from exc


def expected_format() -> Dict[str, str]:
    """Value-shape hints for every recognized sensor, in dashboard order."""
    return {definition.sensor_id: definition.expected_format for definition in SENSOR_DEFINITIONS}
