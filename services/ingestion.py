"""Ingestion gateway: decode, validate, stamp and store sensor submissions."""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any, Callable, Dict, Mapping, Optional, Union

from models.records import Number, Reading, StampedReading
from models.sensors import SENSOR_IDS
from services.errors import (
    InternalIngestionError,
    MalformedPayloadError,
    NoValidDataError,
)
from settings import get_settings
from store.snapshot_store import SnapshotStore

logger = logging.getLogger(__name__)

RawPayload = Union[bytes, bytearray, str, Mapping[str, Any]]

MAX_NESTING_DEPTH = 32


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class IngestionAck:
    """Acknowledgment returned for an accepted submission."""

    received_data: Dict[str, Any]
    timestamp: str
    reading: StampedReading


def _coerce_measurement(sensor_id: str, value: Any) -> Optional[Number]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MalformedPayloadError(
            f"Sensor {sensor_id!r} must be a number or null, got {type(value).__name__}."
        )
    if isinstance(value, float) and not math.isfinite(value):
        raise MalformedPayloadError(f"Sensor {sensor_id!r} must be a finite number.")
    return value


def _nesting_depth(value: Any) -> int:
    depth = 0
    pending = [(value, 1)]
    while pending:
        current, level = pending.pop()
        if isinstance(current, Mapping):
            children = list(current.values())
        elif isinstance(current, (list, tuple)):
            children = list(current)
        else:
            continue
        depth = max(depth, level)
        if depth > MAX_NESTING_DEPTH:
            break
        pending.extend((child, level + 1) for child in children)
    return depth


def decode_payload(raw: RawPayload) -> Reading:
    """Turn a raw submission into a :class:`Reading`.

    Recognized sensor ids become typed optional measurements; every other key
    is carried verbatim in ``extras``.
    """
    if isinstance(raw, (bytes, bytearray, str)):
        try:
            data = json.loads(raw)
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise MalformedPayloadError("Request body is not valid JSON.") from exc
        except RecursionError as exc:
            raise MalformedPayloadError("Sensor payload is nested too deeply.") from exc
    else:
        data = raw

    if not isinstance(data, Mapping):
        raise MalformedPayloadError("Sensor payload must be a JSON object.")

    measurements: Dict[str, Optional[Number]] = {}
    extras: Dict[str, Any] = {}
    for key, value in data.items():
        if not isinstance(key, str):
            raise MalformedPayloadError("Sensor payload keys must be strings.")
        if _nesting_depth(value) > MAX_NESTING_DEPTH - 1:
            raise MalformedPayloadError("Sensor payload is nested too deeply.")
        if key in SENSOR_IDS:
            measurements[key] = _coerce_measurement(key, value)
        else:
            extras[key] = value
    try:
        return Reading(measurements=measurements, extras=extras, key_order=tuple(data))
    except RecursionError as exc:
        raise MalformedPayloadError("Sensor payload is nested too deeply.") from exc


class IngestionGateway:
    """Validates submissions and hands stamped readings to the store."""

    def __init__(
        self,
        store: SnapshotStore,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.store = store
        self._clock = clock

    def submit(self, raw: RawPayload) -> IngestionAck:
        try:
            reading = decode_payload(raw)
        except MalformedPayloadError as exc:
            logger.warning("Rejected malformed sensor payload", extra={"reason": str(exc)})
            raise
        except Exception as exc:
            logger.exception("Failed to decode sensor payload", extra={"reason": str(exc)})
            raise InternalIngestionError() from exc

        if not reading.has_valid_data:
            logger.warning(
                "Rejected sensor payload without recognized values",
                extra={"reason": "no valid data", "extra_keys": sorted(reading.extras)},
            )
            raise NoValidDataError()

        try:
            stamped = StampedReading.stamp(reading, self._clock())
            self.store.append(stamped)
        except Exception as exc:
            logger.exception("Failed to store sensor reading", extra={"reason": str(exc)})
            raise InternalIngestionError() from exc

        logger.info(
            "Received sensor data",
            extra={
                "sensor_ids": reading.sensor_ids,
                "extra_keys": sorted(reading.extras) or None,
                "received_at": stamped.received_at,
            },
        )
        return IngestionAck(
            received_data=reading.to_payload(),
            timestamp=stamped.timestamp,
            reading=stamped,
        )


@lru_cache
def build_default_gateway(capacity: Optional[int] = None) -> IngestionGateway:
    """Factory that wires the process-wide store into a gateway."""
    history_capacity = capacity or get_settings().history_capacity
    store = SnapshotStore(capacity=history_capacity)
    return IngestionGateway(store=store)
