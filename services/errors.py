"""Failures surfaced by the ingestion gateway."""

from __future__ import annotations


class IngestionError(Exception):
    """Base class for rejected or failed submissions."""


class MalformedPayloadError(IngestionError, ValueError):
    """The submission could not be decoded as a sensor record."""


class NoValidDataError(IngestionError, ValueError):
    """The submission carries no value for any recognized sensor."""

    def __init__(self, message: str = "No valid sensor data provided") -> None:
        super().__init__(message)


class InternalIngestionError(IngestionError):
    """Unexpected fault while processing an otherwise accepted submission."""

    def __init__(self, message: str = "Failed to process sensor data") -> None:
        super().__init__(message)
