"""
Telemetry history API endpoints.

Handlers are plain `def` so FastAPI runs them in its threadpool; the log
store's lock and file I/O never block the event loop.
"""

from __future__ import annotations

from fastapi import APIRouter

from . import service

router = APIRouter()


@router.get("/api/messages")
def list_messages() -> list[dict]:
    return service.get_history()


@router.delete("/api/messages")
def clear_messages() -> dict:
    return service.clear_history()
