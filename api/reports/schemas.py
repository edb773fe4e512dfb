"""
Pydantic schemas for report endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

Scalar = str | int | float | None


class HistoryItem(BaseModel):
    # The dashboard posts camelCase keys.
    model_config = ConfigDict(populate_by_name=True)

    person: Scalar = None
    level: Scalar = None
    fill_time: Scalar = Field(default=None, alias="fillTime")
    level_time: Scalar = Field(default=None, alias="levelTime")


class HistoryReportRequest(BaseModel):
    to: str = Field(..., min_length=3, max_length=320)
    items: list[HistoryItem]
