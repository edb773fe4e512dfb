"""
Report API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter

from . import schemas, service

router = APIRouter()


@router.post("/report/history")
async def send_history_report(request: schemas.HistoryReportRequest) -> dict:
    return await service.send_history_report(request)
