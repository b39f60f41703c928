"""Request bodies for period administration."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class PeriodCreateRequest(BaseModel):
    name: str
    start_date: datetime = Field(..., alias="startDate")
    end_date: datetime | None = Field(None, alias="endDate")

    model_config = ConfigDict(populate_by_name=True)


class PeriodActivateRequest(BaseModel):
    reset_data: bool = Field(True, alias="resetData")

    model_config = ConfigDict(populate_by_name=True)
