"""Domain models shared across services."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from models.sensors import SENSOR_IDS

Number = Union[int, float]

WAITING_MESSAGE = (
    "No sensor data received yet. Send POST requests with sensor data to this endpoint"
)


def _freeze(mapping: Mapping[str, Any]) -> Mapping[str, Any]:
    return MappingProxyType(copy.deepcopy(dict(mapping)))


def format_timestamp(moment: datetime) -> str:
    """Render ``moment`` as UTC ISO-8601 with millisecond precision and a ``Z`` suffix."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class Reading:
    """One submission: recognized measurements plus passthrough extras."""

    measurements: Mapping[str, Optional[Number]] = field(default_factory=dict)
    extras: Mapping[str, Any] = field(default_factory=dict)
    key_order: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "measurements", _freeze(self.measurements))
        object.__setattr__(self, "extras", _freeze(self.extras))

    @property
    def has_valid_data(self) -> bool:
        return any(value is not None for value in self.measurements.values())

    @property
    def sensor_ids(self) -> Tuple[str, ...]:
        """Recognized sensors that carry a value, in dashboard order."""
        return tuple(
            sensor_id for sensor_id in SENSOR_IDS if self.measurements.get(sensor_id) is not None
        )

    def value(self, sensor_id: str) -> Optional[Number]:
        return self.measurements.get(sensor_id)

    def to_payload(self) -> Dict[str, Any]:
        """Rebuild the submitted mapping, keeping the submitted key order."""
        combined: Dict[str, Any] = dict(self.extras)
        combined.update(self.measurements)
        payload = {key: combined.pop(key) for key in self.key_order if key in combined}
        payload.update(combined)
        return copy.deepcopy(payload)


@dataclass(frozen=True)
class StampedReading:
    """A reading stamped with the server-observed receipt time."""

    reading: Reading
    timestamp: str
    received_at: int

    @classmethod
    def stamp(cls, reading: Reading, moment: datetime) -> "StampedReading":
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        epoch_seconds = int(moment.replace(microsecond=0).timestamp())
        return cls(
            reading=reading,
            timestamp=format_timestamp(moment),
            received_at=epoch_seconds * 1000 + moment.microsecond // 1000,
        )

    def value(self, sensor_id: str) -> Optional[Number]:
        return self.reading.value(sensor_id)

    def to_dict(self) -> Dict[str, Any]:
        payload = self.reading.to_payload()
        payload["timestamp"] = self.timestamp
        payload["receivedAt"] = self.received_at
        return payload


@dataclass(frozen=True)
class Snapshot:
    """Latest reading plus a bounded recent-history window.

    ``last_values`` holds the newest value received for each sensor, which may
    come from an older reading than ``latest``.
    """

    latest: StampedReading
    recent_history: Tuple[StampedReading, ...]
    total_count: int
    last_values: Mapping[str, Number] = field(default_factory=dict)

    @property
    def last_updated(self) -> str:
        return self.latest.timestamp


@dataclass(frozen=True)
class WaitingDescriptor:
    """Returned instead of a snapshot while no reading has been received."""

    expected_format: Mapping[str, str]
    message: str = WAITING_MESSAGE
