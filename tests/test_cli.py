from __future__ import annotations

from datetime import datetime, timezone
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import pytest
import typer
from typer.testing import CliRunner

from cli.app import _get_state, app

ONLINE_PAYLOAD: Dict[str, Any] = {
    "success": True,
    "latest": {
        "soil-moisture": 35,
        "temperature": 50,
        "humidity": 55,
        "timestamp": "2024-01-01T00:00:01.000Z",
        "receivedAt": 1704067201000,
    },
    "recentHistory": [
        {
            "temperature": 21,
            "timestamp": "2024-01-01T00:00:00.000Z",
            "receivedAt": 1704067200000,
        },
        {
            "soil-moisture": 35,
            "temperature": 50,
            "humidity": 55,
            "timestamp": "2024-01-01T00:00:01.000Z",
            "receivedAt": 1704067201000,
        },
    ],
    "lastUpdated": "2024-01-01T00:00:01.000Z",
    "totalCount": 2,
    "statuses": {},
}

WAITING_PAYLOAD: Dict[str, Any] = {
    "status": "waiting",
    "message": "No sensor data received yet.",
    "expectedFormat": {"soil-moisture": "number (0-100)"},
}


class StubClient:
    def __init__(
        self,
        config,
        snapshot: Optional[Dict[str, Any]] = None,
        history: Optional[List[Dict[str, Any]]] = None,
        polls: Optional[List[Optional[Dict[str, Any]]]] = None,
    ) -> None:
        self.config = config
        self.snapshot = snapshot
        self.history = history if history is not None else list(ONLINE_PAYLOAD["recentHistory"])
        self.polls = list(polls or [])
        self.submitted: List[Dict[str, Any]] = []
        self.fetches = 0
        self.closed = False

    def submit_reading(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        self.submitted.append(payload)
        return {
            "success": True,
            "receivedData": payload,
            "timestamp": "2024-01-01T00:00:02.000Z",
        }

    def get_snapshot(self) -> Dict[str, Any]:
        self.fetches += 1
        return self.snapshot or WAITING_PAYLOAD

    def get_history(self) -> Dict[str, Any]:
        return {"history": self.history, "totalCount": len(self.history)}

    def try_get_snapshot(self) -> Optional[Dict[str, Any]]:
        self.fetches += 1
        if self.polls:
            return self.polls.pop(0)
        return self.snapshot

    def close(self) -> None:
        self.closed = True


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


def _install_stub(monkeypatch, stub: StubClient) -> None:
    def factory(config):
        stub.config = config
        return stub

    monkeypatch.setattr("cli.app.ApiClient", factory)


def test_submit_parses_key_value_pairs(monkeypatch, runner: CliRunner) -> None:
    stub = StubClient(config=None)
    _install_stub(monkeypatch, stub)

    result = runner.invoke(
        app,
        ["submit", "soil-moisture=60", "temperature=22.5", "humidity=null", "device=pi-01"],
    )

    assert result.exit_code == 0
    assert "Reading accepted" in result.stdout
    assert stub.submitted == [
        {"soil-moisture": 60, "temperature": 22.5, "humidity": None, "device": "pi-01"}
    ]
    assert stub.closed is True


def test_submit_rejects_malformed_assignment(monkeypatch, runner: CliRunner) -> None:
    stub = StubClient(config=None)
    _install_stub(monkeypatch, stub)

    result = runner.invoke(app, ["submit", "temperature"])

    assert result.exit_code != 0
    assert stub.submitted == []


def test_status_renders_classified_sensors(monkeypatch, runner: CliRunner) -> None:
    stub = StubClient(config=None, snapshot=ONLINE_PAYLOAD)
    _install_stub(monkeypatch, stub)

    result = runner.invoke(app, ["status"])

    assert result.exit_code == 0
    assert "ONLINE" in result.stdout
    assert "Soil Moisture: 35% (warning)" in result.stdout
    assert "Temperature (DHT22): 50°C (critical)" in result.stdout
    assert "Wind Speed: No Data (no-data)" in result.stdout
    assert "critical: 1" in result.stdout
    assert "warning: 1" in result.stdout


def test_status_reports_waiting(monkeypatch, runner: CliRunner) -> None:
    stub = StubClient(config=None, snapshot=WAITING_PAYLOAD)
    _install_stub(monkeypatch, stub)

    result = runner.invoke(app, ["status"])

    assert result.exit_code == 0
    assert "WAITING" in result.stdout
    assert "soil-moisture: number (0-100)" in result.stdout


def test_status_reports_offline(monkeypatch, runner: CliRunner) -> None:
    stub = StubClient(config=None, snapshot=None)
    _install_stub(monkeypatch, stub)

    result = runner.invoke(app, ["status"])

    assert result.exit_code == 0
    assert "OFFLINE" in result.stdout


def test_watch_polls_on_interval(monkeypatch, runner: CliRunner) -> None:
    stub = StubClient(config=None, snapshot=ONLINE_PAYLOAD)
    _install_stub(monkeypatch, stub)
    sleeps: List[float] = []
    monkeypatch.setattr("cli.app.time.sleep", sleeps.append)

    result = runner.invoke(app, ["watch", "--interval", "0.5", "--iterations", "3"])

    assert result.exit_code == 0
    assert stub.fetches == 3
    assert sleeps == [0.5, 0.5]


def test_export_csv_writes_history(monkeypatch, runner: CliRunner, tmp_path) -> None:
    stub = StubClient(config=None, snapshot=ONLINE_PAYLOAD)
    _install_stub(monkeypatch, stub)
    destination = tmp_path / "history.csv"

    result = runner.invoke(app, ["export", "csv", "--output", str(destination)])

    assert result.exit_code == 0
    lines = destination.read_text(encoding="utf-8").splitlines()
    assert lines[0].startswith("Timestamp,Temperature (°C),Humidity (%)")
    assert lines[1] == "2024-01-01T00:00:00.000Z,21,,,,,"
    assert lines[2] == "2024-01-01T00:00:01.000Z,50,55,35,,,"


def test_export_report_uses_dated_default_name(
    monkeypatch, runner: CliRunner, tmp_path
) -> None:
    stub = StubClient(config=None, snapshot=ONLINE_PAYLOAD)
    _install_stub(monkeypatch, stub)
    monkeypatch.setattr(
        "cli.app._now", lambda: datetime(2024, 3, 9, 8, 30, tzinfo=timezone.utc)
    )
    monkeypatch.chdir(tmp_path)

    result = runner.invoke(app, ["export", "report"])

    assert result.exit_code == 0
    report = (tmp_path / "iot-microclimate-report-2024-03-09.txt").read_text(encoding="utf-8")
    assert report.startswith("IoT Microclimate System Report")
    assert "System Status: ONLINE" in report


def test_export_without_data_writes_nothing(monkeypatch, runner: CliRunner, tmp_path) -> None:
    stub = StubClient(config=None, snapshot=None)
    _install_stub(monkeypatch, stub)
    monkeypatch.chdir(tmp_path)

    result = runner.invoke(app, ["export", "csv"])

    assert result.exit_code == 0
    assert "No data available for export" in result.stdout
    assert list(tmp_path.iterdir()) == []


def _humidity_only_payload() -> Dict[str, Any]:
    entry = {"humidity": 60, "timestamp": "2024-01-01T00:00:05.000Z", "receivedAt": 1704067205000}
    return {
        "success": True,
        "latest": entry,
        "recentHistory": [entry],
        "lastUpdated": entry["timestamp"],
        "totalCount": 1,
        "statuses": {},
    }


def test_watch_keeps_values_known_from_earlier_polls(monkeypatch, runner: CliRunner) -> None:
    stub = StubClient(
        config=None,
        polls=[
            ONLINE_PAYLOAD,
            _humidity_only_payload(),
            WAITING_PAYLOAD,
            _humidity_only_payload(),
        ],
    )
    _install_stub(monkeypatch, stub)
    monkeypatch.setattr("cli.app.time.sleep", lambda _seconds: None)

    result = runner.invoke(app, ["watch", "--iterations", "4"])

    assert result.exit_code == 0
    assert result.stdout.count("Temperature (DHT22): 50°C (critical)") == 2
    assert result.stdout.count("Humidity (DHT22): 60% (normal)") == 2
    assert result.stdout.count("Temperature (DHT22): No Data (no-data)") == 1


def test_status_uses_last_values_from_service(monkeypatch, runner: CliRunner) -> None:
    payload = _humidity_only_payload()
    payload["lastValues"] = {"temperature": 20, "humidity": 60}
    stub = StubClient(config=None, snapshot=payload)
    _install_stub(monkeypatch, stub)

    result = runner.invoke(app, ["status"])

    assert result.exit_code == 0
    assert "Temperature (DHT22): 20°C (normal)" in result.stdout


def test_export_csv_covers_full_history(monkeypatch, runner: CliRunner, tmp_path) -> None:
    history = [
        {"temperature": index, "timestamp": f"2024-01-01T00:00:{index:02d}.000Z"}
        for index in range(45)
    ]
    stub = StubClient(config=None, snapshot=ONLINE_PAYLOAD, history=history)
    _install_stub(monkeypatch, stub)
    destination = tmp_path / "history.csv"

    result = runner.invoke(app, ["export", "csv", "--output", str(destination)])

    assert result.exit_code == 0
    lines = destination.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 46
    assert lines[1] == "2024-01-01T00:00:00.000Z,0,,,,,"
    assert lines[-1] == "2024-01-01T00:00:44.000Z,44,,,,,"


def test_export_report_counts_full_history(monkeypatch, runner: CliRunner, tmp_path) -> None:
    history = [
        {"temperature": index, "timestamp": f"2024-01-01T00:00:{index:02d}.000Z"}
        for index in range(45)
    ]
    stub = StubClient(config=None, snapshot=ONLINE_PAYLOAD, history=history)
    _install_stub(monkeypatch, stub)
    destination = tmp_path / "report.txt"

    result = runner.invoke(app, ["export", "report", "--output", str(destination)])

    assert result.exit_code == 0
    report = destination.read_text(encoding="utf-8")
    assert "RECENT DATA (Last 45 readings):" in report
    assert "2024-01-01T00:00:44.000Z - Temp: 44°C" in report
    assert "2024-01-01T00:00:34.000Z - " not in report


def test_missing_state_exits_with_message(capsys) -> None:
    with pytest.raises(typer.Exit) as exc_info:
        _get_state(SimpleNamespace(obj=None))

    assert exc_info.value.exit_code == 1
    assert "CLI state is uninitialized." in capsys.readouterr().err
