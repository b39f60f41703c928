"""Request bodies for events, participation and attendance sessions."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class EventCreateRequest(BaseModel):
    title: str
    description: str
    start_date_time: datetime = Field(..., alias="startDateTime")
    end_date_time: datetime | None = Field(None, alias="endDateTime")
    location: str | None = None
    capacity: int = 20
    points: int = 0
    experience: int = 0
    created_for_tutor_id: UUID | None = Field(None, alias="createdForTutorId")

    model_config = ConfigDict(populate_by_name=True)


class ParticipationUpdateRequest(BaseModel):
    user_id: UUID = Field(..., alias="userId")
    status: str = Field(..., description="ATTENDED or ABSENT")

    model_config = ConfigDict(populate_by_name=True)


class SessionCreateRequest(BaseModel):
    title: str
    session_date: datetime = Field(..., alias="sessionDate")

    model_config = ConfigDict(populate_by_name=True)


class SessionUpdateRequest(BaseModel):
    title: str | None = None
    session_date: datetime | None = Field(None, alias="sessionDate")

    model_config = ConfigDict(populate_by_name=True)
