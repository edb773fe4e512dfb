from __future__ import annotations

import json
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from telemetry import service as telemetry_service
from telemetry.store import LogEntry


def test_health(client: TestClient) -> None:
    assert client.get("/health").json() == {"status": "ok"}


def test_history_starts_empty(client: TestClient) -> None:
    resp = client.get("/api/messages")
    assert resp.status_code == 200
    assert resp.json() == []


def test_history_returns_entries_in_order(client: TestClient) -> None:
    store = telemetry_service.store()
    store.append(LogEntry("stm32/demo", '{"level":42}', "2024-05-01T10:00:00.000Z"))
    store.append(LogEntry("stm32/demo", '{"level":43}', "2024-05-01T10:00:01.000Z"))

    resp = client.get("/api/messages")
    assert resp.json() == [
        {"topic": "stm32/demo", "message": '{"level":42}', "time": "2024-05-01T10:00:00.000Z"},
        {"topic": "stm32/demo", "message": '{"level":43}', "time": "2024-05-01T10:00:01.000Z"},
    ]


def test_clear_history(client: TestClient, log_path: Path) -> None:
    telemetry_service.store().append(LogEntry.received("stm32/demo", "x"))

    resp = client.delete("/api/messages")
    assert resp.status_code == 200
    assert resp.json() == {"success": True}
    assert client.get("/api/messages").json() == []
    assert json.loads(log_path.read_text(encoding="utf-8")) == []


def test_clear_reports_unpersisted_clear(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    store = telemetry_service.store()
    store.append(LogEntry.received("stm32/demo", "x"))
    monkeypatch.setattr(store, "_persist_locked", lambda: False)

    resp = client.delete("/api/messages")
    assert resp.status_code == 500
    detail = resp.json()["detail"]
    assert detail["success"] is False
    assert detail["cleared_in_memory"] is True
    assert client.get("/api/messages").json() == []


def test_startup_hydrates_existing_log(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    log_path = tmp_path / "existing.json"
    log_path.write_text(
        json.dumps([{"topic": "stm32/demo", "message": "old", "time": "2024-01-01T00:00:00.000Z"}]),
        encoding="utf-8",
    )
    monkeypatch.setenv("MQTT_ENABLED", "0")
    monkeypatch.setenv("MQTT_LOG_PATH", str(log_path))
    monkeypatch.delenv("DATABASE_URL", raising=False)
    telemetry_service.reset_store()

    from main import app

    with TestClient(app) as test_client:
        assert [m["message"] for m in test_client.get("/api/messages").json()] == ["old"]
    telemetry_service.reset_store()


def test_startup_survives_corrupt_log(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    log_path = tmp_path / "corrupt.json"
    log_path.write_text("[{", encoding="utf-8")
    monkeypatch.setenv("MQTT_ENABLED", "0")
    monkeypatch.setenv("MQTT_LOG_PATH", str(log_path))
    monkeypatch.delenv("DATABASE_URL", raising=False)
    telemetry_service.reset_store()

    from main import app

    with TestClient(app) as test_client:
        assert test_client.get("/api/messages").json() == []
    telemetry_service.reset_store()


def test_store_accessor_requires_init() -> None:
    telemetry_service.reset_store()
    with pytest.raises(RuntimeError):
        telemetry_service.store()


def test_startup_survives_unreachable_database(
    monkeypatch: pytest.MonkeyPatch,
    log_path: Path,
    caplog: pytest.LogCaptureFixture,
) -> None:
    log_path.write_text(
        json.dumps([{"topic": "stm32/demo", "message": "kept", "time": "2024-01-01T00:00:00.000Z"}]),
        encoding="utf-8",
    )
    monkeypatch.setenv("MQTT_ENABLED", "0")
    monkeypatch.setenv("MQTT_LOG_PATH", str(log_path))
    monkeypatch.setenv("DATABASE_URL", "postgresql://u:p@127.0.0.1:1/none")
    telemetry_service.reset_store()

    from main import app

    with TestClient(app) as test_client:
        resp = test_client.get("/api/messages")
        assert resp.status_code == 200
        assert [m["message"] for m in resp.json()] == ["kept"]
    telemetry_service.reset_store()
    assert "database_unavailable" in caplog.text
