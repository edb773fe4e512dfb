"""
Telemetry history business logic.

This module owns the process-wide `LogStore`. FastAPI creates and hydrates it
on startup (see `api/main.py`); routes only read and clear through here.
"""

from __future__ import annotations

from pathlib import Path

from fastapi import HTTPException, status

from core import settings

from .store import LogStore

_store: LogStore | None = None


def init_store(path: str | Path | None = None) -> LogStore:
    global _store
    if _store is not None:
        return _store
    _store = LogStore(path or settings.mqtt_log_path())
    _store.hydrate()
    return _store


def reset_store() -> None:
    global _store
    _store = None


def store() -> LogStore:
    if _store is None:
        raise RuntimeError("Log store is not initialized. Call init_store() on startup.")
    return _store


def get_history() -> list[dict[str, str]]:
    """
    Full message history in arrival order. No filtering or paging.
    """
    return [entry.to_dict() for entry in store().read_all()]


def clear_history() -> dict[str, bool]:
    """
    Drop all logged messages.

    When the file rewrite fails the history is already empty in memory, so
    the error says so instead of pretending nothing happened.
    """
    if store().clear():
        return {"success": True}

    raise HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={
            "success": False,
            "cleared_in_memory": True,
            "error": "Messages were cleared in memory but the messages file could not be rewritten.",
        },
    )
