from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from auth import codes
from telemetry import service as telemetry_service
from telemetry.store import LogStore


@pytest.fixture
def log_path(tmp_path: Path) -> Path:
    return tmp_path / "mqtt_log.json"


@pytest.fixture
def store(log_path: Path) -> LogStore:
    return LogStore(log_path)


@pytest.fixture
def code_registry(monkeypatch: pytest.MonkeyPatch) -> codes.CodeRegistry:
    """Fresh process-wide code registry per test."""
    fresh = codes.CodeRegistry()
    monkeypatch.setattr(codes, "_registry", fresh)
    return fresh


@pytest.fixture
def client(monkeypatch: pytest.MonkeyPatch, log_path: Path, code_registry: codes.CodeRegistry):
    """App client with MQTT and Postgres disabled and the log in tmp_path."""
    monkeypatch.setenv("MQTT_ENABLED", "0")
    monkeypatch.setenv("MQTT_LOG_PATH", str(log_path))
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.delenv("SMTP_HOST", raising=False)
    telemetry_service.reset_store()

    from main import app

    with TestClient(app) as test_client:
        yield test_client
    telemetry_service.reset_store()
