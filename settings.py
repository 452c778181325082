from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from store.history import HISTORY_CAPACITY


_LOG_LEVEL_ENV = "LOG_LEVEL"
_HISTORY_CAPACITY_ENV = "SENSOR_HISTORY_CAPACITY"


@dataclass(frozen=True)
class Settings:
    log_level: str
    history_capacity: int


def _read_positive_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        log_level=_read_log_level("INFO"),
        history_capacity=_read_positive_int(_HISTORY_CAPACITY_ENV, HISTORY_CAPACITY),
    )
