"""Request bodies for meetings and decisions.

Field rules (lengths, allowed statuses) are checked by the services so
the user gets the Turkish message for each case; these models only fix
the shape and types.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class MeetingCreateRequest(BaseModel):
    title: str
    description: str | None = None
    meeting_date: datetime = Field(..., alias="meetingDate")
    location: str

    model_config = ConfigDict(populate_by_name=True)


class MeetingUpdateRequest(BaseModel):
    title: str | None = None
    description: str | None = None
    meeting_date: datetime | None = Field(None, alias="meetingDate")
    location: str | None = None
    status: str | None = None

    model_config = ConfigDict(populate_by_name=True)


class DecisionCreateRequest(BaseModel):
    title: str
    description: str | None = None
    target_date: datetime = Field(..., alias="targetDate")
    responsible_user_ids: list[UUID] = Field(default_factory=list, alias="responsibleUserIds")

    model_config = ConfigDict(populate_by_name=True)


class DecisionUpdateRequest(BaseModel):
    title: str | None = None
    description: str | None = None
    target_date: datetime | None = Field(None, alias="targetDate")
    status: str | None = None
    responsible_user_ids: list[UUID] | None = Field(None, alias="responsibleUserIds")

    model_config = ConfigDict(populate_by_name=True)


class DecisionStatusRequest(BaseModel):
    status: str = Field(..., description="TODO, IN_PROGRESS or DONE")
