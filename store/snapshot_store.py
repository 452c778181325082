from __future__ import annotations

import logging
from threading import Lock
from typing import Dict, Mapping, Optional, Tuple, Union

from models.records import Number, Snapshot, StampedReading, WaitingDescriptor
from models.sensors import SENSOR_IDS, expected_format
from store.history import HISTORY_CAPACITY, RECENT_WINDOW, BoundedHistory

logger = logging.getLogger(__name__)


class SnapshotStore:
    """Process-lifetime holder of the latest reading and its bounded history."""

    def __init__(
        self,
        capacity: int = HISTORY_CAPACITY,
        recent_window: int = RECENT_WINDOW,
    ) -> None:
        self._history: BoundedHistory[StampedReading] = BoundedHistory(capacity)
        self._latest: Optional[StampedReading] = None
        self._last_values: Dict[str, Number] = {}
        self.recent_window = recent_window
        self._lock = Lock()

    @property
    def capacity(self) -> int:
        return self._history.capacity

    @property
    def latest(self) -> Optional[StampedReading]:
        with self._lock:
            return self._latest

    def append(self, reading: StampedReading) -> None:
        with self._lock:
            evicted = self._history.append(reading)
            self._latest = reading
            for sensor_id in reading.reading.sensor_ids:
                self._last_values[sensor_id] = reading.value(sensor_id)
            total = len(self._history)

        logger.debug(
            "Appended reading to history",
            extra={
                "received_at": reading.received_at,
                "total_count": total,
                "evicted": evicted.received_at if evicted is not None else None,
            },
        )

    def get_snapshot(self) -> Union[Snapshot, WaitingDescriptor]:
        with self._lock:
            latest = self._latest
            recent = self._history.recent(self.recent_window)
            total = len(self._history)
            last_values = self._ordered_last_values()

        if latest is None:
            return WaitingDescriptor(expected_format=expected_format())
        return Snapshot(
            latest=latest,
            recent_history=recent,
            total_count=total,
            last_values=last_values,
        )

    def last_values(self) -> Mapping[str, Number]:
        """Newest value received per sensor since the store was created or cleared."""
        with self._lock:
            return self._ordered_last_values()

    def history(self) -> Tuple[StampedReading, ...]:
        """Return every retained reading, oldest first."""
        with self._lock:
            return tuple(self._history)

    def clear(self) -> None:
        with self._lock:
            self._history.clear()
            self._latest = None
            self._last_values.clear()

    def _ordered_last_values(self) -> Dict[str, Number]:
        return {
            sensor_id: self._last_values[sensor_id]
            for sensor_id in SENSOR_IDS
            if sensor_id in self._last_values
        }

    def __len__(self) -> int:
        with self._lock:
            return len(self._history)
