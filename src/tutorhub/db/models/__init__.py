"""SQLAlchemy ORM models for TutorHub.

This package contains all database models organized by domain:
- base: Common metadata, column types, and enums
- users: Users and classrooms
- gamification: Periods, points and experience transactions
- events: Events, workshops, attendance sessions
- meetings: Board meetings and decisions
- social: Social posts and content ingredients
- donations: Donors and donations
"""

from tutorhub.db.models.base import Base, metadata
from tutorhub.db.models.donations import Donation, Donor
from tutorhub.db.models.events import (
    Attendance,
    AttendanceSession,
    Event,
    EventParticipant,
    EventType,
    Part2Event,
    Part2EventParticipant,
)
from tutorhub.db.models.gamification import ExperienceTransaction, Period, PointsTransaction
from tutorhub.db.models.meetings import (
    Meeting,
    MeetingAttendee,
    MeetingDecision,
    decision_responsible_users,
)
from tutorhub.db.models.social import ContentIngredient, SocialPost
from tutorhub.db.models.users import Classroom, User

__all__ = [
    "Attendance",
    "AttendanceSession",
    "Base",
    "Classroom",
    "ContentIngredient",
    "Donation",
    "Donor",
    "Event",
    "EventParticipant",
    "EventType",
    "ExperienceTransaction",
    "Meeting",
    "MeetingAttendee",
    "MeetingDecision",
    "Part2Event",
    "Part2EventParticipant",
    "Period",
    "PointsTransaction",
    "SocialPost",
    "User",
    "decision_responsible_users",
    "metadata",
]
