"""Pydantic schemas for the HTTP API layer.

Field names are snake_case in Python and camelCase on the wire, matching the
``receivedAt`` stamp carried by every reading.
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from models.sensors import SensorStatus


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class IngestionResponse(ApiModel):
    """Acknowledgment for an accepted sensor submission."""

    success: bool = True
    message: str = "Sensor data received successfully"
    received_data: Dict[str, Any] = Field(
        ..., description="Submitted payload echoed back without modification."
    )
    timestamp: str = Field(..., description="Server receipt time, ISO-8601 UTC.")


class SnapshotResponse(ApiModel):
    """Latest reading, a recent history window and derived statuses."""

    success: bool = True
    latest: Dict[str, Any]
    recent_history: List[Dict[str, Any]] = Field(
        default_factory=list, description="Newest readings, oldest first."
    )
    last_updated: str
    total_count: int = Field(..., ge=0)
    last_values: Dict[str, Any] = Field(
        default_factory=dict, description="Newest value received for each sensor."
    )
    statuses: Dict[str, SensorStatus] = Field(default_factory=dict)


class HistoryResponse(ApiModel):
    """Every retained reading, oldest first."""

    history: List[Dict[str, Any]] = Field(default_factory=list)
    total_count: int = Field(..., ge=0)


class WaitingResponse(ApiModel):
    """Returned while no sensor data has been received."""

    status: Literal["waiting"] = "waiting"
    message: str
    expected_format: Dict[str, str]


class ThresholdSchema(ApiModel):
    min: float
    max: float


class SensorDefinitionSchema(ApiModel):
    sensor_id: str
    name: str
    unit: str
    threshold: ThresholdSchema
    expected_format: str
