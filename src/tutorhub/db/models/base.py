"""Base model definitions, mixins, and common types.

This module provides:
- SQLAlchemy declarative base with naming conventions
- Common column type annotations (UUIDs, timestamps)
- Enum types used across multiple models
"""

import enum
import uuid
from datetime import datetime
from typing import Annotated

from sqlalchemy import DateTime, MetaData, String, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import DeclarativeBase, mapped_column, registry

# Naming convention for constraints ensures consistent migration generation.
# See: https://alembic.sqlalchemy.org/en/latest/naming.html
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=NAMING_CONVENTION)

type_registry = registry()

UUIDPrimaryKey = Annotated[
    uuid.UUID,
    mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        server_default=text("gen_random_uuid()"),
    ),
]

TimestampTZ = Annotated[
    datetime,
    mapped_column(DateTime(timezone=True), server_default=text("now()")),
]

OptionalTimestampTZ = Annotated[
    datetime | None,
    mapped_column(DateTime(timezone=True), nullable=True),
]

ShortString = Annotated[str, mapped_column(String(100))]
MediumString = Annotated[str, mapped_column(String(255))]


class Base(DeclarativeBase):
    """Declarative base for all TutorHub models."""

    metadata = metadata
    registry = type_registry


# =============================================================================
# Common Enums
# =============================================================================


class UserRole(enum.Enum):
    """Platform roles.

    ASISTAN is the assistant role with access to the donor ledger.
    """

    ADMIN = "ADMIN"
    TUTOR = "TUTOR"
    STUDENT = "STUDENT"
    ASISTAN = "ASISTAN"


class PeriodStatus(enum.Enum):
    """Academic period status. At most one period is ACTIVE."""

    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class TransactionType(enum.Enum):
    """Points transaction direction."""

    AWARD = "AWARD"
    REDEEM = "REDEEM"


class EventStatus(enum.Enum):
    """Event and workshop status.

    Values:
        YAKINDA: Upcoming
        DEVAM_EDIYOR: In progress
        TAMAMLANDI: Completed
        IPTAL_EDILDI: Cancelled
    """

    YAKINDA = "YAKINDA"
    DEVAM_EDIYOR = "DEVAM_EDIYOR"
    TAMAMLANDI = "TAMAMLANDI"
    IPTAL_EDILDI = "IPTAL_EDILDI"


class ParticipantStatus(enum.Enum):
    """Participation status of a user in an event or workshop."""

    REGISTERED = "REGISTERED"
    ATTENDED = "ATTENDED"
    ABSENT = "ABSENT"


class SessionStatus(enum.Enum):
    """Attendance session status."""

    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"


class MeetingStatus(enum.Enum):
    """Board meeting status."""

    PLANNED = "PLANNED"
    ONGOING = "ONGOING"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class DecisionStatus(enum.Enum):
    """Meeting decision kanban column."""

    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    DONE = "DONE"


class SocialPlatform(enum.Enum):
    INSTAGRAM = "INSTAGRAM"
    TWITTER = "TWITTER"
    FACEBOOK = "FACEBOOK"
    LINKEDIN = "LINKEDIN"
    TIKTOK = "TIKTOK"
    YOUTUBE = "YOUTUBE"


class PostStatus(enum.Enum):
    DRAFT = "DRAFT"
    SCHEDULED = "SCHEDULED"
    PUBLISHED = "PUBLISHED"
    ARCHIVED = "ARCHIVED"


class IngredientType(enum.Enum):
    TEXT = "TEXT"
    IMAGE = "IMAGE"
    VIDEO = "VIDEO"
    LINK = "LINK"
    HASHTAG = "HASHTAG"
