"""
Report business logic: render the history table and e-mail it.
"""

from __future__ import annotations

import logging

from fastapi import HTTPException, status

from core import mailer
from telemetry.store import utc_timestamp

from . import render, schemas

logger = logging.getLogger(__name__)

REPORT_SUBJECT = "Device History Report"


async def send_history_report(payload: schemas.HistoryReportRequest) -> dict:
    html = render.history_report_html(
        payload.items,
        generated_at=utc_timestamp(),
        product_name=mailer.from_name(),
    )
    try:
        await mailer.send_mail(to=payload.to, subject=REPORT_SUBJECT, html=html)
    except mailer.MailerError as exc:
        logger.error("history_report_failed to=%s items=%s error=%s", payload.to, len(payload.items), exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"success": False, "error": "Failed to send history report email."},
        ) from exc

    logger.info("history_report_sent to=%s items=%s", payload.to, len(payload.items))
    return {"success": True}
