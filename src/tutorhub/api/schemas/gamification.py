"""Request bodies for points, experience and rollbacks."""

from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class PointsAwardRequest(BaseModel):
    student_id: UUID = Field(..., alias="studentId")
    points: int = Field(..., description="Positive to award, negative to take back")
    reason: str | None = None

    model_config = ConfigDict(populate_by_name=True)


class ExperienceAwardRequest(BaseModel):
    student_id: UUID = Field(..., alias="studentId")
    amount: int

    model_config = ConfigDict(populate_by_name=True)


class RollbackRequest(BaseModel):
    transaction_id: UUID = Field(..., alias="transactionId")
    transaction_type: str = Field(..., alias="transactionType", description="POINTS or EXPERIENCE")
    reason: str

    model_config = ConfigDict(populate_by_name=True)
