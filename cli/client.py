from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

import httpx
import typer

from cli.config import CLIConfig


class ApiClient:
    """Minimal HTTP client for the sensor hub service."""

    def __init__(self, config: CLIConfig) -> None:
        self._config = config
        self._client = httpx.Client(base_url=config.base_url, timeout=config.request_timeout)

    def close(self) -> None:
        self._client.close()

    def submit_reading(self, payload: Mapping[str, Any]) -> Dict[str, Any]:
        try:
            response = self._client.post("/api/sensors", json=dict(payload))
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        except httpx.RequestError as exc:
            self._handle_request_error(exc)
        return response.json()

    def get_snapshot(self) -> Dict[str, Any]:
        try:
            response = self._client.get("/api/sensors")
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        except httpx.RequestError as exc:
            self._handle_request_error(exc)
        return response.json()

    def get_history(self) -> Dict[str, Any]:
        try:
            response = self._client.get("/api/sensors/history")
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        except httpx.RequestError as exc:
            self._handle_request_error(exc)
        return response.json()

    def try_get_snapshot(self) -> Optional[Dict[str, Any]]:
        """Fetch the snapshot, returning ``None`` when the service is unreachable."""
        try:
            response = self._client.get("/api/sensors")
            response.raise_for_status()
        except httpx.HTTPError:
            return None
        return response.json()

    @staticmethod
    def _handle_http_error(exc: httpx.HTTPStatusError) -> None:
        detail: str | None = None
        try:
            data = exc.response.json()
            detail = data.get("detail")
        except Exception:  # noqa: BLE001 - best effort parsing
            detail = exc.response.text.strip()
        message = (
            f"Request failed with status {exc.response.status_code}: {detail or 'no detail provided.'}"
        )
        typer.secho(message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    def _handle_request_error(self, exc: httpx.RequestError) -> None:
        typer.secho(
            f"Could not reach {self._config.base_url}: {exc}",
            fg=typer.colors.RED,
            err=True,
        )
        raise typer.Exit(code=1)
