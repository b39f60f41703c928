"""Pydantic schemas for the TutorHub API, organized by namespace."""

from tutorhub.api.schemas.common import ActionResult, ErrorResponse, HealthResponse, ok
from tutorhub.api.schemas.donations import (
    DonationCreateRequest,
    DonorCreateRequest,
    DonorUpdateRequest,
)
from tutorhub.api.schemas.events import (
    EventCreateRequest,
    ParticipationUpdateRequest,
    SessionCreateRequest,
    SessionUpdateRequest,
)
from tutorhub.api.schemas.gamification import (
    ExperienceAwardRequest,
    PointsAwardRequest,
    RollbackRequest,
)
from tutorhub.api.schemas.meetings import (
    DecisionCreateRequest,
    DecisionStatusRequest,
    DecisionUpdateRequest,
    MeetingCreateRequest,
    MeetingUpdateRequest,
)
from tutorhub.api.schemas.periods import PeriodActivateRequest, PeriodCreateRequest
from tutorhub.api.schemas.social import (
    IngredientCreateRequest,
    IngredientUpdateRequest,
    PostCreateRequest,
    PostUpdateRequest,
)

__all__ = [
    "ActionResult",
    "DecisionCreateRequest",
    "DecisionStatusRequest",
    "DecisionUpdateRequest",
    "DonationCreateRequest",
    "DonorCreateRequest",
    "DonorUpdateRequest",
    "ErrorResponse",
    "EventCreateRequest",
    "ExperienceAwardRequest",
    "HealthResponse",
    "IngredientCreateRequest",
    "IngredientUpdateRequest",
    "MeetingCreateRequest",
    "MeetingUpdateRequest",
    "ParticipationUpdateRequest",
    "PeriodActivateRequest",
    "PeriodCreateRequest",
    "PointsAwardRequest",
    "PostCreateRequest",
    "PostUpdateRequest",
    "RollbackRequest",
    "SessionCreateRequest",
    "SessionUpdateRequest",
    "ok",
]
