"""HTTP route definitions for the service."""

from __future__ import annotations

from typing import List, Union

from fastapi import APIRouter, Depends, HTTPException, Request, status

from app.schemas import (
    HistoryResponse,
    IngestionResponse,
    SensorDefinitionSchema,
    SnapshotResponse,
    ThresholdSchema,
    WaitingResponse,
)
from models.records import WaitingDescriptor
from models.sensors import SENSOR_DEFINITIONS
from services.classifier import classify_values
from services.errors import InternalIngestionError, MalformedPayloadError, NoValidDataError
from services.ingestion import IngestionGateway, build_default_gateway
from store.snapshot_store import SnapshotStore

router = APIRouter()


def get_gateway() -> IngestionGateway:
    return build_default_gateway()


def get_store(gateway: IngestionGateway = Depends(get_gateway)) -> SnapshotStore:
    return gateway.store


@router.post(
    "/api/sensors",
    response_model=IngestionResponse,
    summary="Submit a sensor reading.",
)
async def submit_reading(
    request: Request,
    gateway: IngestionGateway = Depends(get_gateway),
) -> IngestionResponse:
    body = await request.body()
    try:
        ack = gateway.submit(body)
    except (MalformedPayloadError, NoValidDataError) as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except InternalIngestionError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(exc),
        ) from exc
    return IngestionResponse(received_data=ack.received_data, timestamp=ack.timestamp)


@router.get(
    "/api/sensors",
    response_model=Union[SnapshotResponse, WaitingResponse],
    summary="Fetch the latest reading and recent history.",
)
async def get_snapshot(
    store: SnapshotStore = Depends(get_store),
) -> Union[SnapshotResponse, WaitingResponse]:
    snapshot = store.get_snapshot()
    if isinstance(snapshot, WaitingDescriptor):
        return WaitingResponse(
            message=snapshot.message,
            expected_format=dict(snapshot.expected_format),
        )
    return SnapshotResponse(
        latest=snapshot.latest.to_dict(),
        recent_history=[reading.to_dict() for reading in snapshot.recent_history],
        last_updated=snapshot.last_updated,
        total_count=snapshot.total_count,
        last_values=dict(snapshot.last_values),
        statuses=classify_values(snapshot.last_values),
    )


@router.get(
    "/api/sensors/history",
    response_model=HistoryResponse,
    summary="Fetch every retained reading.",
)
async def get_history(
    store: SnapshotStore = Depends(get_store),
) -> HistoryResponse:
    history = store.history()
    return HistoryResponse(
        history=[reading.to_dict() for reading in history],
        total_count=len(history),
    )


@router.get(
    "/api/sensors/definitions",
    response_model=List[SensorDefinitionSchema],
    summary="List recognized sensors with units and thresholds.",
)
async def list_definitions() -> List[SensorDefinitionSchema]:
    return [
        SensorDefinitionSchema(
            sensor_id=definition.sensor_id,
            name=definition.name,
            unit=definition.unit,
            threshold=ThresholdSchema(
                min=definition.threshold.min, max=definition.threshold.max
            ),
            expected_format=definition.expected_format,
        )
        for definition in SENSOR_DEFINITIONS
    ]


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "See /health for service status."}
